# ProCMS core: projects, Kanban boards, and client request approvals
#
# Components:
#   schema.py   - Data model (Task, KanbanColumn, TaskComment, Project, ...)
#   config.py   - YAML configuration and logging setup
#   store.py    - In-memory entity store
#   seed.py     - YAML seed loader
#   session.py  - Viewer sessions and capability gates
#   events.py   - Event bus shared by the controllers
#   board.py    - Kanban board controller and drag gestures
#   comments.py - Comment threads and the approval workflow
#   reports.py  - Employee EOD reports
#   directory.py - Creating projects, clients and employees
#   views.py    - Role-scoped dashboards and text renderings
