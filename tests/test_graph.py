from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from donor_merge.graph import (
    EmailKey,
    NameKey,
    RecordNode,
    build_identity_graph,
    connected_groups,
    identity_keys,
)
from donor_merge.records import DonationRecord


def _record(record_id, name, email=None) -> DonationRecord:  # type: ignore[no-untyped-def]
    return DonationRecord(
        id=record_id,
        user_name=name,
        user_email=email,
        amount=Decimal("1.00"),
        payment_method="alipay",
        status="pending",
        created_at=datetime(2026, 2, 1, tzinfo=timezone.utc),
    )


def test_identity_keys_normalize_name_and_email() -> None:
    keys = identity_keys(_record(1, "  Tom ", " Tom@QQ.com "))

    assert keys == [NameKey("tom"), EmailKey("tom@qq.com")]


def test_blank_email_adds_no_email_key() -> None:
    assert identity_keys(_record(1, "Tom", "   ")) == [NameKey("tom")]
    assert identity_keys(_record(2, "Tom", None)) == [NameKey("tom")]


def test_graph_links_records_to_their_keys() -> None:
    graph = build_identity_graph(
        [
            _record(3, "Tommy", "tom@qq.com"),
            _record(2, "Tom"),
            _record(1, "Tom", "tom@qq.com"),
        ]
    )

    assert graph.record_nodes == [RecordNode(3), RecordNode(2), RecordNode(1)]
    assert graph.key_count == 3
    assert set(graph.neighbors(EmailKey("tom@qq.com"))) == {RecordNode(3), RecordNode(1)}
    assert set(graph.neighbors(NameKey("tom"))) == {RecordNode(2), RecordNode(1)}
    assert graph.neighbors(RecordNode(2)) == [NameKey("tom")]


def test_name_and_email_keys_with_same_text_do_not_collide() -> None:
    graph = build_identity_graph(
        [
            _record(2, "a@b.com"),
            _record(1, "Zed", "a@b.com"),
        ]
    )

    groups = connected_groups(graph)

    assert [[record.id for record in group] for group in groups] == [[2], [1]]


def test_components_start_from_records_in_input_order() -> None:
    graph = build_identity_graph(
        [
            _record(6, "Rae"),
            _record(5, "Sol", "sol@example.org"),
            _record(4, "rae", "sol@example.org"),
            _record(3, "Uma"),
        ]
    )

    groups = connected_groups(graph)

    assert len(groups) == 2
    assert {record.id for record in groups[0]} == {6, 5, 4}
    assert [record.id for record in groups[1]] == [3]


def test_missing_name_fails_fast() -> None:
    with pytest.raises(ValueError):
        build_identity_graph([_record(1, None)])


def test_missing_id_fails_fast() -> None:
    with pytest.raises(ValueError):
        build_identity_graph([_record(None, "Tom")])
