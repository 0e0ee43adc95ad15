#!/usr/bin/env python3
"""Seed a development database with a demo user's projects, tasks and dependencies.

Usage:
    python scripts/seed_dev_data.py

Uses FD_DATABASE_URL (or the default from settings) and creates missing tables.
Prints a bearer token for the demo user so the API can be exercised straight away.
"""

import asyncio
import uuid

from fastapi import HTTPException
from sqlalchemy import text

from app.core.auth import create_access_token
from app.core.database import async_session_factory, engine, init_db
from app.services.dependencies import create_dependency

DEMO_USER_ID = "user_demo"

# Deterministic UUIDs for reproducibility
PROJECT_IDS = [uuid.UUID(f"00000000-0000-0000-0000-0000000001{i:02d}") for i in range(2)]
TASK_IDS = [uuid.UUID(f"00000000-0000-0000-0000-0000000002{i:02d}") for i in range(8)]


async def seed():
    await init_db()

    async with async_session_factory() as session:
        # Projects
        projects = [
            ("Study Center", "study-center", "coding"),
            ("Home Renovation", "home-renovation", "general"),
        ]
        for pid, (name, slug, ptype) in zip(PROJECT_IDS, projects):
            await session.execute(text("""
                INSERT INTO projects (id, user_id, name, slug, status, type)
                VALUES (:id, :uid, :name, :slug, 'active', :type)
                ON CONFLICT (id) DO NOTHING
            """), {"id": pid, "uid": DEMO_USER_ID, "name": name, "slug": slug, "type": ptype})

        # Tasks: first 5 in project 0, the rest in project 1
        task_specs = [
            ("Design vocabulary schema", "done", "high"),
            ("Build word capture form", "in_progress", "high"),
            ("Add Quran passage references", "todo", "medium"),
            ("Flashcard review screen", "todo", "medium"),
            ("Search across notes", "todo", "low"),
            ("Pick paint colours", "done", "low"),
            ("Order flooring", "todo", "urgent"),
            ("Install flooring", "todo", "high"),
        ]
        for i, (tid, (title, status, priority)) in enumerate(zip(TASK_IDS, task_specs)):
            pid = PROJECT_IDS[0] if i < 5 else PROJECT_IDS[1]
            await session.execute(text("""
                INSERT INTO tasks (id, user_id, project_id, title, status, priority_level)
                VALUES (:id, :uid, :pid, :title, :status, :priority)
                ON CONFLICT (id) DO NOTHING
            """), {"id": tid, "uid": DEMO_USER_ID, "pid": pid, "title": title, "status": status, "priority": priority})

        await session.commit()

        # Dependencies (blocked, blocking) go through the service so every invariant is checked
        edges = [
            (TASK_IDS[1], TASK_IDS[0]),
            (TASK_IDS[2], TASK_IDS[0]),
            (TASK_IDS[3], TASK_IDS[1]),
            (TASK_IDS[3], TASK_IDS[2]),
            (TASK_IDS[7], TASK_IDS[6]),
        ]
        created = 0
        for blocked_id, blocking_id in edges:
            try:
                await create_dependency(session, blocked_id, blocking_id, DEMO_USER_ID)
                await session.commit()
                created += 1
            except HTTPException as exc:
                await session.rollback()
                print(f"skipped {blocking_id} -> {blocked_id}: {exc.detail}")

    await engine.dispose()
    print(f"✅ Seeded user '{DEMO_USER_ID}' with 2 projects, 8 tasks, {created} new dependencies.")
    print(f"Bearer token: {create_access_token(DEMO_USER_ID)}")


if __name__ == "__main__":
    asyncio.run(seed())
