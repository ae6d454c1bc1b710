from importlib import import_module

modules = [
    'auth',
    'users',
    'audit',
    'scientists',
    'research_activities',
    'ibc_applications',
    'ibc_board_members',
    'publications',
    'certifications',
    'facilities',
]

for m in modules:
    import_module(f'.{m}', __name__)

__all__ = modules
