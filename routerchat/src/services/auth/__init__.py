"""Authentication services package."""

from .token_verifier import BaseTokenVerifier, SupabaseTokenVerifier, extract_bearer_token

__all__ = ["BaseTokenVerifier", "SupabaseTokenVerifier", "extract_bearer_token"]
