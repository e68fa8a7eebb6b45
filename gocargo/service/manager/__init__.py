"""
Managers
========

The stateful services that coordinate changes spanning more than one
collection. They are created once per app and shared by every request.
"""
