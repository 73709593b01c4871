"""
HashEBooks edge functions.

Privileged HTTP handlers for the library:
- Admin account deletion with step-up password verification
- Self-service welcome email
- Book review decisions and owner notices
- Send-email hook for the identity provider
"""
