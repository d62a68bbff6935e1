"""Firebase Authentication and Firestore access."""

from content_gateway.firebase.admin import init_firebase
from content_gateway.firebase.documents import DocumentStore
from content_gateway.firebase.identity import IdentityService

__all__ = ["DocumentStore", "IdentityService", "init_firebase"]
