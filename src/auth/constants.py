"""
Constantes pour le module d'authentification.
"""

# --- Messages d'erreur ---
ERROR_CREDENTIALS_INVALID = "Email ou mot de passe incorrect"
ERROR_TOKEN_INVALID = "Token d'authentification invalide"
ERROR_TOKEN_MISSING = "Token d'authentification manquant"
ERROR_USER_INACTIVE = "Account is not active. Please wait for admin approval."
ERROR_PERMISSION_DENIED = "Permission refusée"
ERROR_EMAIL_ALREADY_REGISTERED = "Email already registered"
ERROR_PERSONAL_TOKEN_NOT_FOUND = "Jeton d'accès introuvable"

# --- En-têtes HTTP ---
HEADER_WWW_AUTHENTICATE = "WWW-Authenticate"
HEADER_WWW_AUTHENTICATE_VALUE = "Bearer"
