from mentalsum.profile.service import UserService, format_relative_date

__all__ = ["UserService", "format_relative_date"]
