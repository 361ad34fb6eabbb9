# Services package init
"""
GreenLog Backend — Services Layer
===================================

What:  One data operation per method, sitting between routes (HTTP) and the
       database.
How:   Each service is a stateless singleton. Every method takes the
       Database handle first, opens exactly one managed connection, runs
       parameterized SQL and returns rows, a count or a success flag.

Service Inventory:
    - UserService:   app users, user-task links, user reports
    - TaskService:   tasks
    - PlantService:  plants, plant logs and their lookup tables
    - GardenService: soils, garden types, garden logs
    - SchemaService: introspection, projection, whole-schema reset/seed
    - queries:       helpers shared by the services (filters, seeding, rows)
"""
