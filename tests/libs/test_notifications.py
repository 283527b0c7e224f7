import pytest

from libs.common.notifications import NotificationCenter


@pytest.mark.asyncio
async def test_notification_center_keeps_bounded_history():
    center = NotificationCenter(history=2)

    await center.success("one")
    await center.info("two")
    await center.error("three", kind="TRANSIENT_FAILURE", item_id="x")

    notices = center.recent()
    assert [n.message for n in notices] == ["two", "three"]
    assert notices[-1].kind == "TRANSIENT_FAILURE"
    assert notices[-1].context == {"item_id": "x"}
    assert [n.message for n in center.recent(1)] == ["three"]
    assert center.recent(0) == []


@pytest.mark.asyncio
async def test_clear_empties_history():
    center = NotificationCenter()
    await center.success("saved")

    center.clear()

    assert center.recent() == []
