from .component import articles_using, can_delete, ensure_can_delete

__all__ = ["articles_using", "can_delete", "ensure_can_delete"]
