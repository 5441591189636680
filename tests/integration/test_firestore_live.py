"""Integration test against a real Firestore project.

Skipped unless CLOUDSYNC_PROJECT_ID is set and the credential file named by
CLOUDSYNC_CREDENTIALS (default ./firebase.json) exists. The "testing"
collection of that project is cleared by the test.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar

import pytest

from cloudsync import CloudSync, StaticConfigProvider, SyncConfig

PROJECT_ID = os.getenv("CLOUDSYNC_PROJECT_ID")
CREDENTIALS = os.getenv("CLOUDSYNC_CREDENTIALS", "./firebase.json")

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        not PROJECT_ID or not Path(CREDENTIALS).is_file(),
        reason="requires CLOUDSYNC_PROJECT_ID and a Firestore credential file",
    ),
]


class LiveObj(CloudSync):
    key_field: ClassVar[str | None] = "key"
    config_provider: ClassVar[StaticConfigProvider | None] = (
        StaticConfigProvider(
            SyncConfig(project_id=PROJECT_ID, credential_path=CREDENTIALS, collection="testing")
        )
        if PROJECT_ID
        else None
    )

    key: str
    data: str


@pytest.mark.asyncio
async def test_saving_object() -> None:
    for obj in await LiveObj.fetch_all():
        await obj.remove()

    obj = LiveObj(key="aaa", data="data")
    await obj.save()
    await obj.save()

    objects = await LiveObj.fetch_all()
    assert objects == [obj]
    assert await LiveObj.fetch("aaa") == obj

    await obj.remove()
    assert "aaa" not in await LiveObj.fetch_all_as_map()
