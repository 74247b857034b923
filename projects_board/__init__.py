# Projects Board client: session handling and a three-column task view
#
# Components:
#   schema.py      - Data model (Task, Identity, Session, TaskStatus, TaskPriority)
#   errors.py      - Error taxonomy raised by the client and the stores
#   config.py      - YAML + environment configuration
#   client.py      - HTTP client for the Projects Board REST service
#   storage.py     - SQLite persistence for the session token and identity
#   events.py      - Change notifications for front ends
#   session.py     - Session store (login, register, restore, logout)
#   collection.py  - Client-side task collection grouped by status
#   validation.py  - Form checks run before anything is sent
#   app.py         - Wires everything together per user
