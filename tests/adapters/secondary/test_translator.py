from __future__ import annotations

from brickbridge.adapters.secondary import SubsetsResponse, translate_subsets
from brickbridge.domain.model import CompositionLine


def test_translate_keeps_parts_and_drops_alternates(
    grouped_subsets_payload: dict[str, object],
) -> None:
    lines = translate_subsets(SubsetsResponse.model_validate(grouped_subsets_payload))

    assert lines == [
        CompositionLine(part_id="3626bpb0001", color_id=3, quantity=1),
        CompositionLine(part_id="973pb0123c01", color_id=11, quantity=1),
        CompositionLine(part_id="970c00", color_id=0, quantity=1),
    ]
    assert lines[0].name == "Head"


def test_blank_part_numbers_are_skipped() -> None:
    response = SubsetsResponse.model_validate(
        {"data": [{"item": {"no": "  "}, "color_id": 1, "quantity": 1}]}
    )

    assert translate_subsets(response) == []
