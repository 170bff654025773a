import pytest

from portfolio_chat.embeddings.index import VectorIndex, VectorIndexError
from portfolio_chat.knowledge.chunker import Chunk


def _chunks(n):
    return [Chunk(text=f"chunk {i}", source_offset=i * 10) for i in range(n)]


@pytest.fixture
def index():
    vectors = [
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.7, 0.7, 0.0],
        [0.0, 0.0, 1.0],
    ]
    return VectorIndex.build(_chunks(4), vectors)


def test_query_ranks_by_cosine_similarity(index):
    results = index.query([1.0, 0.1, 0.0], k=4)

    assert [c.text for c, _ in results] == ["chunk 0", "chunk 2", "chunk 1", "chunk 3"]
    scores = [s for _, s in results]
    assert scores == sorted(scores, reverse=True)
    assert scores[0] == pytest.approx(0.995, abs=1e-3)


def test_scores_ignore_vector_magnitude(index):
    small = index.query([1.0, 0.0, 0.0], k=1)
    large = index.query([50.0, 0.0, 0.0], k=1)

    assert small[0][0] == large[0][0]
    assert small[0][1] == pytest.approx(large[0][1])


def test_k_bounds_result_length(index):
    assert len(index.query([1.0, 0.0, 0.0], k=3)) == 3
    assert len(index.query([1.0, 0.0, 0.0], k=10)) == 4
    assert index.query([1.0, 0.0, 0.0], k=0) == []


def test_query_is_deterministic(index):
    first = index.query([0.3, 0.3, 0.3], k=4)
    for _ in range(5):
        assert index.query([0.3, 0.3, 0.3], k=4) == first


def test_ties_keep_chunk_order():
    vectors = [[0.0, 1.0], [1.0, 0.0], [1.0, 0.0], [2.0, 0.0]]
    idx = VectorIndex.build(_chunks(4), vectors)

    results = idx.query([1.0, 0.0], k=3)

    assert [c.source_offset for c, _ in results] == [10, 20, 30]


def test_empty_index_returns_nothing():
    idx = VectorIndex.build([], [])
    assert len(idx) == 0
    assert idx.query([1.0, 2.0], k=3) == []


def test_len_and_dimension(index):
    assert len(index) == 4
    assert index.dimension == 3


def test_count_mismatch_rejected():
    with pytest.raises(VectorIndexError):
        VectorIndex.build(_chunks(2), [[1.0, 0.0]])


def test_inconsistent_dimension_rejected():
    with pytest.raises(VectorIndexError):
        VectorIndex.build(_chunks(2), [[1.0, 0.0], [1.0, 0.0, 0.0]])


def test_empty_vectors_rejected():
    with pytest.raises(VectorIndexError):
        VectorIndex.build(_chunks(1), [[]])


def test_query_dimension_mismatch_rejected(index):
    with pytest.raises(VectorIndexError):
        index.query([1.0, 0.0], k=2)
