from .external_link_service import ExternalLinkService

__all__ = ["ExternalLinkService"]
