# Task board: folders as columns, markdown files as tasks.
#
# Components:
#   schema.py    - Data model (Column, BoardConfig, Task, request inputs)
#   errors.py    - Error kinds with their HTTP status codes
#   config.py    - .workspace-kanban parsing, writing and validation
#   theme.py     - .kanban-theme.conf loading
#   codec.py     - Task file header/body format
#   resolver.py  - Operator decisions for missing config and orphan folders
#   reconcile.py - Keeps column folders in line with the board config
#   store.py     - Filesystem task repository (slugs, CRUD, moves)
#   settings.py  - Server settings (YAML file, environment, CLI flags)
