# relevance/embeddings.py

import logging
from typing import Any, List, Optional, Sequence

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

# Same model family as the Related Insights vectors; e5 is the multilingual fallback
PRIMARY_MODEL = "sentence-transformers/multi-qa-MiniLM-L6-cos-v1"
FALLBACK_MODEL = "intfloat/multilingual-e5-large"

DEFAULT_API_URL = "https://api-inference.huggingface.co"
DEFAULT_TIMEOUT = 10.0
DEFAULT_RETRIES = 2
RETRY_BACKOFF = 0.3
RETRY_STATUSES = (429, 503)


class EmbeddingError(Exception):
    """A single embedding call failed."""

    def __init__(self, message: str, model: Optional[str] = None):
        super().__init__(message)
        self.model = model


def _build_session(retries: int) -> requests.Session:
    """Session retrying 429/503 and timeouts with exponential backoff."""
    retry = Retry(
        total=retries,
        backoff_factor=RETRY_BACKOFF,
        status_forcelist=RETRY_STATUSES,
        allowed_methods=frozenset({"POST"}),
        raise_on_status=False,
    )
    session = requests.Session()
    session.mount("https://", HTTPAdapter(max_retries=retry))
    session.mount("http://", HTTPAdapter(max_retries=retry))
    return session


def parse_feature_extraction(result: Any) -> List[float]:
    """
    Normalize a feature-extraction response to a flat vector.
    [[...]] -> first row, [...] of numbers -> itself, anything else -> [].
    """
    if not isinstance(result, list) or not result:
        return []

    first = result[0]
    if isinstance(first, list):
        if first and all(isinstance(x, (int, float)) and not isinstance(x, bool) for x in first):
            return [float(x) for x in first]
        return []

    if all(isinstance(x, (int, float)) and not isinstance(x, bool) for x in result):
        return [float(x) for x in result]
    return []


class HuggingFaceEmbedder:
    """
    Calls the Hugging Face inference API (feature-extraction pipeline).
    Tries the primary model first, then the fallback one.
    """

    def __init__(
        self,
        api_key: str = "",
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        retries: int = DEFAULT_RETRIES,
        models: Sequence[str] = (PRIMARY_MODEL, FALLBACK_MODEL),
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.models = tuple(models)
        self.session = session or _build_session(retries)

    def _headers(self) -> dict:
        if not self.api_key:
            return {}
        return {"Authorization": f"Bearer {self.api_key}"}

    def _call(self, model: str, text: str) -> List[float]:
        url = f"{self.base_url}/pipeline/feature-extraction/{model}"
        payload = {"inputs": text, "options": {"wait_for_model": True}}
        try:
            response = self.session.post(
                url, json=payload, headers=self._headers(), timeout=self.timeout
            )
            response.raise_for_status()
            result = response.json()
        except requests.RequestException as exc:
            raise EmbeddingError(f"inference request failed: {exc}", model=model) from exc
        except ValueError as exc:
            raise EmbeddingError(f"invalid JSON from inference API: {exc}", model=model) from exc

        return parse_feature_extraction(result)

    def embed(self, text: str) -> List[float]:
        last_error: Optional[EmbeddingError] = None
        for model in self.models:
            try:
                return self._call(model, text)
            except EmbeddingError as exc:
                logger.warning("[embed] %s failed: %s", model, exc)
                last_error = exc
        raise last_error or EmbeddingError("no embedding models configured")


class LocalEmbedder:
    """sentence-transformers model, loaded on first use."""

    def __init__(self, model_name: str = PRIMARY_MODEL):
        self.model_name = model_name
        self._model = None

    def _load_model(self):
        if self._model is None:
            try:
                from sentence_transformers import SentenceTransformer

                logger.info("[embed] loading SentenceTransformer model: %s", self.model_name)
                self._model = SentenceTransformer(self.model_name)
            except Exception as exc:
                raise EmbeddingError(f"failed to load model: {exc}", model=self.model_name) from exc
        return self._model

    def embed(self, text: str) -> List[float]:
        model = self._load_model()
        try:
            emb = model.encode(text, normalize_embeddings=True)
        except Exception as exc:
            raise EmbeddingError(f"encoding failed: {exc}", model=self.model_name) from exc
        return [float(x) for x in emb.tolist()]


def get_embedder(backend: str = "huggingface", **kwargs):
    backend = (backend or "huggingface").lower()
    if backend == "local":
        return LocalEmbedder(**kwargs)
    if backend == "huggingface":
        return HuggingFaceEmbedder(**kwargs)
    raise ValueError(f"Unknown embedding backend: {backend}")


_default_embedder = None


def default_embedder():
    """Shared Hugging Face embedder, built on first use."""
    global _default_embedder
    if _default_embedder is None:
        _default_embedder = get_embedder()
    return _default_embedder


def generate_embedding(text: str, embedder=None) -> List[float]:
    """
    Generate a single embedding vector for a piece of text.
    Never raises: any provider failure gives an empty embedding,
    which the related-insights ranker treats as "no similarity".
    """
    if not text or not text.strip():
        return []

    embedder = embedder or default_embedder()
    try:
        emb = embedder.embed(text)
    except EmbeddingError as exc:
        logger.warning("[generate_embedding] falling back to empty embedding: %s", exc)
        return []

    logger.debug("[generate_embedding] embedding length: %d", len(emb))
    return emb
