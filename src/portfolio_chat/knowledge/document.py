"""
Knowledge Document

The fixed biography text the chat assistant answers from. A deployment can
replace it with a UTF-8 file named by ``KNOWLEDGE_PATH``; the text is read
once per process and never mutated.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

logger = logging.getLogger("chat.knowledge")


DEFAULT_KNOWLEDGE_TEXT = """\
I am Mushtaq Ahmad, a Full-Stack developer with experience in GenAI & LLM \
integration based in Barcelona, Spain.

Skills: React, Next.js, Three.js, TypeScript, Tailwind, VueJS, Node.js, \
Express, Python, Flask, PHP-Laravel, Java-SpringBoot, MongoDB, PostgreSQL, \
REST APIs, LangChain.js, Docker, PyTorch, Hugging Face, OpenAI APIs, \
retrieval-augmented generation (RAG) and vector database concepts.

Work experience:
- KNITERATE S.L., Web Developer (Frontend Focus), 2025 - Feb 2026. Developed \
and maintained knitting software, worked closely with designers to turn visual \
concepts into features, and improved codebase performance for digital \
knitting production.
- Freelance Web Developer, 2023 - 2024. Built a MERN stack ROI calculator that \
generates year-wise profit and agency commission breakdowns, and a real-time \
AI chatbot with Node, Express, MongoDB, Socket.io and the OpenAI API.
- Mega Star, IT Technician, 2019 - 2024. Maintained and troubleshot IT \
systems and gave hardware, software and client support.
- Global Coaching Center, Mathematics Tutor.

Projects:
- Event Management System: a full stack NextJS and MongoDB app to create, \
manage and attend events.
- MasterJob Portal: an AI-powered job portal built with Flask.
- FinchMotion: a Core Java and JDBC robotics control system for the Finch Robot.
- Betflix: a Laravel streaming platform with watchlists and subscriptions.
- MAI: a RAG virtual assistant built with Python, Hugging Face and React that \
turns static documents into an interactive knowledge base.

Contact: mushtaquok70@gmail.com. GitHub: https://github.com/MushtaqSoftDev
"""


def read_knowledge(path: Optional[str] = None) -> str:
    """
    Return the knowledge text, from ``path`` when given, else the default.

    Raises
    ------
    OSError
        If ``path`` is given but cannot be read.
    """
    if not path:
        return DEFAULT_KNOWLEDGE_TEXT

    text = Path(path).read_text(encoding="utf-8")
    logger.info("Loaded knowledge text from %s (%d chars)", path, len(text))
    return text


@lru_cache
def load_knowledge(path: Optional[str] = None) -> str:
    """Process-wide cached variant of :func:`read_knowledge`."""
    return read_knowledge(path)
