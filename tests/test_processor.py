import json
from unittest.mock import MagicMock, patch

import pytest

from paperswipe.llm.processor import (
    BUSY_ABSTRACT_ZH,
    BUSY_TAGS,
    BUSY_TLDR,
    MAX_ABSTRACT_CHARS,
    PENDING_ABSTRACT_ZH,
    PENDING_TAGS,
    build_prompt,
    enrich_papers,
    parse_enrichment,
)
from paperswipe.models import RawPaper

_RAW = [
    RawPaper("2301.00001", "Planning Agents", ["Ada"], "2023-01-02", "We study planning."),
    RawPaper("2301.00002", "Tool Use", ["Alan", "Grace"], "2023-01-03", "We study tools."),
]

_FULL_RESPONSE = json.dumps(
    [
        {"id": "2301.00002", "abstract_zh": "我们研究工具。", "tldr": "Tools help.", "tags": ["LLM", "Tools", "Agents"]},
        {"id": "2301.00001", "abstract_zh": "我们研究规划。", "tldr": "Plans help.", "tags": ["Planning", "RL", "LLM"]},
    ],
    ensure_ascii=False,
)


def _mock_client(content: str | None = None, error: Exception | None = None) -> MagicMock:
    client = MagicMock()
    if error is not None:
        client.chat.side_effect = error
    else:
        client.chat.return_value = {"message": {"content": content}}
    return client


def test_enrich_papers_merges_by_id_in_input_order() -> None:
    with patch("paperswipe.llm.processor.ollama_client.Client", return_value=_mock_client(_FULL_RESPONSE)):
        papers = enrich_papers(_RAW)

    assert [p.paper_id for p in papers] == ["2301.00001", "2301.00002"]
    first = papers[0]
    assert first.abstract_zh == "我们研究规划。"
    assert first.tldr == "Plans help."
    assert first.tags == ["Planning", "RL", "LLM"]
    assert first.abstract_en == "We study planning."
    assert first.year == "2023-01-02"
    assert first.authors == ["Ada"]


def test_enrich_papers_missing_entry_gets_pending_fallback() -> None:
    partial = json.dumps([{"id": "2301.00001", "abstract_zh": "规划", "tldr": "Plans.", "tags": ["A"]}])

    with patch("paperswipe.llm.processor.ollama_client.Client", return_value=_mock_client(partial)):
        papers = enrich_papers(_RAW)

    assert len(papers) == 2
    missing = papers[1]
    assert missing.abstract_zh == PENDING_ABSTRACT_ZH
    assert missing.tldr == "Tool Use"
    assert missing.tags == PENDING_TAGS
    assert missing.abstract_en == "We study tools."


def test_enrich_papers_unparsable_output_keeps_count() -> None:
    with patch("paperswipe.llm.processor.ollama_client.Client", return_value=_mock_client("sorry, no JSON")):
        papers = enrich_papers(_RAW)

    assert len(papers) == len(_RAW)
    assert all(p.abstract_zh == PENDING_ABSTRACT_ZH for p in papers)


def test_enrich_papers_service_error_uses_busy_fallback() -> None:
    client = _mock_client(error=ConnectionError("ollama down"))
    with patch("paperswipe.llm.processor.ollama_client.Client", return_value=client):
        papers = enrich_papers(_RAW)

    assert len(papers) == 2
    for raw, paper in zip(_RAW, papers):
        assert paper.paper_id == raw.paper_id
        assert paper.abstract_en == raw.summary
        assert paper.abstract_zh == BUSY_ABSTRACT_ZH
        assert paper.tldr == BUSY_TLDR
        assert paper.tags == BUSY_TAGS


def test_enrich_papers_empty_input_skips_service() -> None:
    with patch("paperswipe.llm.processor.ollama_client.Client") as mock_cls:
        assert enrich_papers([]) == []
    mock_cls.assert_not_called()


def test_enrich_papers_invalid_tags_fall_back() -> None:
    bad_tags = json.dumps([{"id": "2301.00001", "abstract_zh": "规划", "tldr": "Plans.", "tags": "LLM"}])
    with patch("paperswipe.llm.processor.ollama_client.Client", return_value=_mock_client(bad_tags)):
        papers = enrich_papers(_RAW[:1])

    assert papers[0].tags == PENDING_TAGS
    assert papers[0].abstract_zh == "规划"


@pytest.mark.parametrize(
    "content",
    [
        _FULL_RESPONSE,
        f"```json\n{_FULL_RESPONSE}\n```",
        f'{{"papers": {_FULL_RESPONSE}}}',
        f"Here you go:\n{_FULL_RESPONSE}\nThanks!",
    ],
)
def test_parse_enrichment_accepts_common_shapes(content: str) -> None:
    entries = parse_enrichment(content)
    assert {e["id"] for e in entries} == {"2301.00001", "2301.00002"}


def test_parse_enrichment_single_object() -> None:
    entries = parse_enrichment('{"id": "2301.00001", "tldr": "x"}')
    assert entries == [{"id": "2301.00001", "tldr": "x"}]


def test_parse_enrichment_garbage_returns_empty() -> None:
    assert parse_enrichment("not json at all") == []
    assert parse_enrichment('"just a string"') == []


def test_build_prompt_embeds_truncated_payload() -> None:
    long_raw = RawPaper("2301.00009", "Long", [], "", "x" * (MAX_ABSTRACT_CHARS + 500))
    prompt = build_prompt([long_raw])

    assert '"id": "2301.00009"' in prompt
    assert "x" * MAX_ABSTRACT_CHARS + "..." in prompt
    assert "x" * (MAX_ABSTRACT_CHARS + 1) not in prompt
    assert "abstract_zh" in prompt
