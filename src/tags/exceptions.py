class TagDomainException(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class TagNotFoundException(TagDomainException):
    def __init__(self, tag_id: int):
        self.tag_id = tag_id
        super().__init__(f"Tag avec ID {tag_id} non trouvé.")

class DuplicateTagNameException(TagDomainException):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Le tag '{name}' existe déjà.")
