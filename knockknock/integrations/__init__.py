"""
Web framework integrations.

Import the one you need directly, e.g.:

    from knockknock.integrations.fastapi import knock_dependency
"""
