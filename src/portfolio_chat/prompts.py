"""
Prompt templates for grounded question answering.
"""

from __future__ import annotations

from typing import Sequence

from .knowledge.chunker import Chunk


RAG_SYSTEM_PROMPT = """\
You are the virtual assistant on a developer's portfolio website. Answer \
visitors' questions about the developer using ONLY the context below. \
Answer briefly and in a friendly tone. If the context does not contain the \
answer, say that you don't know rather than guessing."""


RAG_USER_TEMPLATE = """\
Context:
{context}

Question: {question}
Helpful answer:"""


def build_context(chunks: Sequence[Chunk]) -> str:
    return "\n\n".join(chunk.text.strip() for chunk in chunks)


def build_prompt(question: str, chunks: Sequence[Chunk]) -> str:
    """Render the user turn: retrieved passages followed by the question."""
    return RAG_USER_TEMPLATE.format(
        context=build_context(chunks),
        question=question.strip(),
    )
