# Routes package init
"""
GreenLog Backend — API Routes Package
=======================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - users.py:   /appusers, /insert-appuser, /search-user, /task-load,
                  /api/user-tasks/{userID}, /insert-user-task, ...
    - tasks.py:   /tasks, /insert-task, /delete-task, ...
    - plants.py:  /plants, /plant-logs, /insert-plant, /search-plant,
                  /count-plants-by-soil, /plant-families, ...
    - garden.py:  /soils, /garden-types, /garden-logs, /insert-garden-log, ...
    - schema.py:  /all-tables, /table-columns/{tableName}, /projection,
                  /initiate-all, /populate-all
    - health.py:  /check-db-connection, /health

Design Principle:
    Routes are THIN. They parse the request, call one service method with
    the injected Database handle and wrap the result. Errors are raised, not
    returned, and turned into responses by the handlers in main.py.
"""
