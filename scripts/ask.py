import argparse
import asyncio
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from portfolio_chat.config import settings
from portfolio_chat.core.errors import ChatError
from portfolio_chat.pipeline.chat_pipeline import ChatPipeline


async def main(question: str, show_context: bool) -> int:
    pipeline = ChatPipeline(settings)
    print(f"Provider: {settings.llm_provider}")

    try:
        if show_context:
            for chunk, score in await pipeline.retrieve(question):
                print(f"[{score:.3f}] @{chunk.source_offset}: {chunk.text[:80]!r}...")
            print()

        answer = await pipeline.answer(question)
    except ChatError as exc:
        print(f"Error ({type(exc).__name__}): {exc}")
        return 1

    print(answer)
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Ask the portfolio assistant a question.")
    parser.add_argument("question")
    parser.add_argument(
        "--show-context",
        action="store_true",
        help="print the retrieved chunks before the answer",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.question, args.show_context)))
