"""Exceptions du domaine StoreSettings."""

class StoreSettingDomainException(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

class StoreSettingNotFoundException(StoreSettingDomainException):
    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Setting '{slug}' not found")

class InvalidSettingValueException(StoreSettingDomainException):
    pass
