#!/usr/bin/env python3
"""
Quick end-to-end check of the ProCMS core against the seed data.

Usage:
    python verify_procms.py [--config config/procms.yaml] [--seed data/seed.yaml]
"""
import argparse

from procms.board import KanbanBoard, LastColumnError
from procms.comments import CommentEngine
from procms.config import Config, configure_logging
from procms.events import EventBus
from procms.seed import load_seed_file
from procms.session import PermissionDenied, Session
from procms.views import client_dashboard, render_board, render_thread


def main():
    ap = argparse.ArgumentParser(description="ProCMS core verification walkthrough")
    ap.add_argument("--config", default=None, help="Path to procms.yaml")
    ap.add_argument("--seed", default=None, help="Seed YAML (overrides config)")
    args = ap.parse_args()

    cfg = Config.load(args.config)
    if args.seed:
        cfg.seed_path = args.seed
        cfg.resolve_paths()
    configure_logging(cfg.log_level)

    print("=" * 60)
    print("ProCMS Core Verification")
    print("=" * 60)

    print("\n[1/6] Loading seed data...")
    store = load_seed_file(cfg.seed_path)
    events = EventBus()
    engine = CommentEngine(store, events, cfg)
    board = engine.board_for("proj-1")
    print(f"✅ Store seeded from {cfg.seed_path}")

    admin = Session.admin()
    employee = Session.for_employee(store, "emp-1")
    client = Session.for_client(store, "client-1")

    print("\n[2/6] Client posts a request...")
    comment = engine.add_comment(client, "task-3", "Add dark mode to the checkout pages")
    print(f"✅ {comment.id} [{comment.status.value}] by {comment.author_name}")

    try:
        engine.approve(client, comment.id)
        print("❌ Client was allowed to approve")
        return
    except PermissionDenied:
        print("   → Client cannot approve (as expected)")

    print("\n[3/6] Employee approves the request...")
    task = engine.approve(employee, comment.id)
    print(f"✅ Generated {task.id}: {task.title}")
    print(f"   Due: {task.due_date}  Tags: {task.tags}  Column: {task.status}")
    again = engine.approve(employee, comment.id)
    print(f"   → Second approval created: {again}")

    print("\n[4/6] Dragging the new task to review...")
    with board.begin_drag(employee, task.id) as drag:
        drag.drop("review")
    print(f"✅ {task.id} now in {store.get_task(task.id).status}")

    print("\n[5/6] Admin reshapes the board...")
    column = board.add_column(admin, "QA", "#EC4899")
    board.move_task(employee, "task-5", column.id)
    moved = board.delete_column(admin, column.id)
    print(f"✅ Deleted {column.id}; {moved} task(s) moved to {board.columns()[0].id}")
    try:
        lone = KanbanBoard(store, "proj-2", events, cfg)
        for col in lone.columns()[1:]:
            lone.delete_column(admin, col.id)
        lone.delete_column(admin, lone.columns()[0].id)
        print("❌ Last column was deleted")
        return
    except LastColumnError:
        print("   → Last column of proj-2 kept (as expected)")

    print("\n[6/6] Rendering portals...")
    print(render_board(board, engine))
    print()
    print(render_thread(engine, store.get_task("task-3"), employee))
    dash = client_dashboard(store, client)
    print(f"\nClient paid ${dash['total_paid']:,} / outstanding ${dash['total_outstanding']:,}")

    print("\n" + "=" * 60)
    print(f"✅ ALL CHECKS PASSED ({len(events.history)} events)")
    print("=" * 60)


if __name__ == "__main__":
    main()
