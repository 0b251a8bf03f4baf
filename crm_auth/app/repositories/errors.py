class UniqueConstraintViolation(Exception):
    """Raised by repositories when a write hits a unique constraint"""
