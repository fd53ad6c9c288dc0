from connectvida.config.settings import settings

__all__ = ["settings"]
