#!/usr/bin/env python3
"""
Sets the `role` custom claim (customer | staff | admin) on a Firebase user.
"""

import sys

from firebase_admin import auth

from restaurant.config import get_firebase_app
from restaurant.schemas.principal import ROLES


def set_role_claim(user_email: str, role: str) -> bool:
    """Writes {'role': role} into the user's custom claims, keeping other claims."""
    if role not in ROLES:
        print(f"❌ Unknown role: {role} (expected one of {', '.join(ROLES)})")
        return False

    try:
        app = get_firebase_app()
        print("✅ Firebase Admin SDK initialized")
    except Exception as e:
        print(f"❌ Firebase initialization failed: {e}")
        return False

    try:
        user = auth.get_user_by_email(user_email, app=app)
        print(f"✅ User found: {user.uid} - {user.email}")

        claims = dict(user.custom_claims or {})
        claims["role"] = role
        # the role claim replaces the legacy admin flag
        claims.pop("admin", None)
        auth.set_custom_user_claims(user.uid, claims, app=app)
        print(f"✅ Role '{role}' set for user: {user_email}")

        user = auth.get_user(user.uid, app=app)
        print(f"✅ Custom claims: {user.custom_claims}")
        return True

    except auth.UserNotFoundError:
        print(f"❌ User not found: {user_email}")
        return False
    except Exception as e:
        print(f"❌ Error setting role claim: {e}")
        return False


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print("Usage: python set_role_claim.py <user_email> <customer|staff|admin>")
        print("Example: python set_role_claim.py chef@example.com staff")
        sys.exit(1)

    user_email, role = sys.argv[1], sys.argv[2]
    print(f"Setting role '{role}' for: {user_email}")

    if set_role_claim(user_email, role):
        print("🎉 Role claim set successfully!")
        print("The user will need to sign out and sign in again for the changes to take effect.")
    else:
        print("💥 Failed to set role claim")
        sys.exit(1)
