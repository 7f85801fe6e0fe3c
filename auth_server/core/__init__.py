"""
Core module - service orchestration, configuration and errors

Provides:
- AuthService: Register / Login / Refresh orchestration
- AuthConfig: Configuration (defaults + environment)
- AuthError hierarchy: InvalidInput, Conflict, InvalidCredentials,
  TooManyAttempts, InvalidToken, TokenNotFound
"""
