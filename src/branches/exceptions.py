"""Exceptions du module branches."""

class BranchDomainException(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class BranchNotFoundException(BranchDomainException):
    def __init__(self, branch_id: int):
        self.branch_id = branch_id
        super().__init__(f"Branch not found (ID: {branch_id})")
