"""프롬프트 템플릿/빌더.

기사 요약 요청용 지시문(일본어)과 Responses API payload를 생성한다.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable

from newsfeed.models.domain import SummaryInput, SummaryPerson

INSTRUCTION_HEADER = (
    "以下の金融ニュース記事を 3 文以内の日本語で要約してください。",
    "要点を中心に、市場への影響が明確になるように書いてください。",
    "人物名と機関名は正確に記載し、推測は避けてください。",
)


def format_persons(persons: Iterable[SummaryPerson]) -> str:
    return ", ".join(f"{p.name_en} ({p.name_jp}, {p.institution_code})" for p in persons)


def build_summary_instruction(inp: SummaryInput) -> str:
    lines = [
        *INSTRUCTION_HEADER,
        f"対象人物: {format_persons(inp.persons)}",
        f"記事タイトル: {inp.title}",
        f"記事URL: {inp.url}",
        "本文: ",
        inp.content,
    ]
    return "\n".join(lines)


def build_summary_payload(
    inp: SummaryInput,
    *,
    model: str,
    max_output_tokens: int,
    temperature: float,
) -> Dict[str, Any]:
    return {
        "model": model,
        "input": build_summary_instruction(inp),
        "max_output_tokens": int(max_output_tokens),
        "temperature": float(temperature),
    }
