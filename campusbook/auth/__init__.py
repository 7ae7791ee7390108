"""Credential and session management for CampusBook."""

from campusbook.auth.service import AuthService, AuthUser, create_auth_service

__all__ = ["AuthService", "AuthUser", "create_auth_service"]
