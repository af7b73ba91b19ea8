"""Supabase auth and edge function clients"""
from .auth import AuthError, AuthSession, AuthUser, SupabaseAuthClient, SIGNED_IN, SIGNED_OUT
from .storage import AttachmentUploader, UploadError

__all__ = [
    "AuthError",
    "AuthSession",
    "AuthUser",
    "SupabaseAuthClient",
    "SIGNED_IN",
    "SIGNED_OUT",
    "AttachmentUploader",
    "UploadError",
]
