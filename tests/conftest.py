import pytest

from portfolio_chat.config import Settings


FEATURES = ["know", "react", "node", "developer", "mushtaq", "barcelona"]


class KeywordEmbedder:
    """
    Deterministic stand-in for a hosted embedding model: one dimension per
    keyword, valued by its occurrence count.
    """

    def __init__(self):
        self.calls = []

    async def embed(self, texts, task="document"):
        self.calls.append((list(texts), task))
        return [self._vector(t) for t in texts]

    async def embed_query(self, text):
        return (await self.embed([text], task="query"))[0]

    @staticmethod
    def _vector(text):
        lowered = text.lower()
        return [float(lowered.count(word)) + 0.01 for word in FEATURES]


class EchoGenerator:
    """Answers with the top retrieved chunk so tests can see the ranking."""

    def __init__(self):
        self.calls = []

    async def generate(self, question, context):
        self.calls.append((question, list(context)))
        return f"Based on my notes: {context[0].text}"


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        llm_provider="google",
        google_api_key="test-google-key",
        chunk_size=600,
        chunk_overlap=100,
        top_k=3,
    )


@pytest.fixture
def keyword_embedder():
    return KeywordEmbedder()


@pytest.fixture
def echo_generator():
    return EchoGenerator()
