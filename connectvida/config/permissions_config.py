"""
Permissions and Roles Configuration
This config defines the permission catalogue for the church panel and the
permission preset granted to each member role (membros.funcao).
Members may receive extra permissions on top of their preset through
membros.extra_permissoes.
"""

from typing import Iterable, List, Optional

# Permission catalogue: id -> label shown in the admin UI
PERMISSIONS = {
    "member-management": "Gestão de Membros",
    "ministries": "Gestão de Ministério",
    "events-management": "Gestão de Eventos",
    "devotionals-management": "Gestão de Devocionais",
    "order-of-service": "Ordem de Culto/Eventos",
    "journey-config": "Configuração da Jornada",
    "financial-panel": "Painel Financeiro",
    "kids-management": "Gestão Kids",
    "notification-management": "Gestão de Notificações",
    "devotional-approver": "Aprovar Devocionais",
    "system-settings": "Configurações do Sistema",
}

ALL_PERMISSIONS = list(PERMISSIONS.keys())

# Role presets; roles missing here get no panel permissions
ROLE_PERMISSIONS = {
    "super_admin": ALL_PERMISSIONS,
    "admin": ALL_PERMISSIONS,
    "pastor": [
        "member-management",
        "ministries",
        "events-management",
        "devotionals-management",
        "order-of-service",
        "journey-config",
        "financial-panel",
        "kids-management",
        "notification-management",
    ],
    "lider_ministerio": [
        "ministries",
        "order-of-service",
        "events-management",
        "devotionals-management",
    ],
    "financeiro": ["financial-panel"],
    "gestao_kids": ["kids-management"],
    "integra": ["member-management", "journey-config"],
    "midia_tecnologia": ["order-of-service"],
    "voluntario": [],
    "membro": [],
    "gc_membro": [],
    "gc_lider": [],
}

ROLES = list(ROLE_PERMISSIONS.keys())

# Roles allowed to administer a church (and its child churches)
CHURCH_ADMIN_ROLES = ("admin", "pastor")

# Roles allowed to list the church's member directory
MEMBER_DIRECTORY_ROLES = ("admin", "pastor", "integra", "lider_ministerio", "gestao_kids")

# Roles that see every kid of the church
KIDS_MANAGER_ROLES = ("admin", "pastor", "lider_ministerio", "gestao_kids")

# Roles counted as leadership in child church metrics
LEADER_ROLES = ("admin", "pastor", "lider_ministerio")


def get_role_permissions(role: Optional[str]) -> List[str]:
    """Return the permission preset for a role (empty for unknown roles)."""
    if not role:
        return []
    return list(ROLE_PERMISSIONS.get(role, []))


def get_effective_permissions(role: Optional[str], extra_permissions: Optional[Iterable[str]] = None) -> List[str]:
    """
    Role preset plus the member's extra permissions, in catalogue order.
    Unknown permission ids in extra_permissions are ignored.
    """
    granted = set(get_role_permissions(role))
    for permission in extra_permissions or []:
        if permission in PERMISSIONS:
            granted.add(permission)
    return [p for p in ALL_PERMISSIONS if p in granted]


def invalid_permissions(permissions: Iterable[str]) -> List[str]:
    return [p for p in permissions if p not in PERMISSIONS]
