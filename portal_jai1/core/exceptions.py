# portal_jai1/core/exceptions.py
"""Domain exceptions raised by the service layer and mapped to HTTP in main.py"""


class PortalError(Exception):
    """Base class for application errors"""


class EncryptionConfigError(PortalError):
    """Cipher secret is missing or unusable; the service must not start"""


class ProfileNotFoundError(PortalError):
    def __init__(self, profile_id):
        self.profile_id = profile_id
        super().__init__(f"Client profile {profile_id} not found")
