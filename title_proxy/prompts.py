"""Prompt text for the title and draft-answer endpoints."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from title_proxy.guide.text import clean_inline

TITLE_SYSTEM_PROMPT = (
    "あなたは業務システムのタイトル生成アシスタントです。入力文から、日本語タイトルを1行で作成してください。"
    "最重要: 「何をしたいか/何ができないか」が一読で分かる表現を優先し、「〜について」「〜の件」は原則使わない。"
    "例: 「CSV取り込みが完了しない」「請求書PDFを再発行できない」。"
    "記号は最小限、冗長な敬語は不要、20〜40文字程度。"
)

DRAFT_SYSTEM_PROMPT = (
    "あなたはカスタマーサポートの返信文作成アシスタントです。"
    "入力された質問と参考回答、ガイド情報から、丁寧で実務的な回答文を1通作成します。"
    "日本語で出力し、不要な注釈は書かず、テンプレート構成に沿って返してください。"
)

MAX_CANDIDATES = 8


def format_reference_text(candidates: Sequence[Mapping[str, Any]]) -> str:
    """Render similar past Q&A pairs as ``#n`` blocks."""
    return "\n\n".join(
        f"#{i}\n質問: {clean_inline(c.get('question'))}\n回答: {clean_inline(c.get('answer'))}"
        for i, c in enumerate(candidates, start=1)
    )


def build_draft_prompt(
    question: str,
    template: str,
    candidates: Sequence[Mapping[str, Any]],
    guide_context: str = "",
) -> str:
    reference_text = format_reference_text(candidates[:MAX_CANDIDATES])
    return (
        "以下の質問に回答文を作成してください。\n\n"
        f"質問:\n{question}\n\n"
        f"参考回答（類似）:\n{reference_text or 'なし'}\n\n"
        f"ガイド情報（ヘルプサイト抜粋）:\n{guide_context or 'なし'}\n\n"
        f"テンプレート:\n{template}\n\n"
        "要件:\n"
        "- テンプレートの文体・構成を維持する\n"
        "- 「> 質問内容」には質問を引用する\n"
        "- 「回答内容」は質問に合わせて具体化する\n"
        "- 参考回答をそのままコピペせず、今回の質問向けに調整する\n"
        "- ガイド情報がある場合は操作手順や画面名をガイドの記載に合わせる"
    )
