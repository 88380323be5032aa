"""Local llama.cpp engine that rewrites transcripts."""

import logging
import threading
from pathlib import Path
from typing import Optional, Set

from llama_cpp import Llama

from .base import AbstractCleanupBackend
from .prompts import END_OF_TURN, build_cleanup_prompt
from ..errors import DecodeFailure, LoadFailure, ModelNotFound, NotLoaded, TokenizationFailure
from ..models.assets import PHI3_MINI

logger = logging.getLogger(__name__)

LLM_MODEL_FILENAME = PHI3_MINI.filename


class LlamaCleaningEngine(AbstractCleanupBackend):
    """Cleans up transcribed speech with greedy decoding on a local GGUF model.

    Generation stops at an end-of-generation token or after max_new_tokens
    tokens, whichever comes first, so long inputs can come back cut short.
    """

    def __init__(self, models_dir: str, n_ctx: int = 2048, max_new_tokens: int = 256):
        """Initialize an unloaded engine.

        Args:
            models_dir: Directory holding the GGUF weights file
            n_ctx: Context window in tokens (prompt plus output)
            max_new_tokens: Hard cap on generated tokens
        """
        self.models_dir = Path(models_dir)
        self.n_ctx = n_ctx
        self.max_new_tokens = max_new_tokens
        self.model_name = "phi-3-mini-4k-instruct"

        self._model: Optional[Llama] = None
        self._stop_tokens: Set[int] = set()
        self._lock = threading.Lock()

        logger.info(f"LlamaCleaningEngine initialized with model: {self.model_name}")

    @property
    def model_path(self) -> Path:
        return self.models_dir / LLM_MODEL_FILENAME

    def is_model_downloaded(self) -> bool:
        return self.model_path.exists()

    def load(self) -> None:
        """Load the GGUF file, replacing any model already loaded.

        Raises:
            ModelNotFound: The weights file is not on disk
            LoadFailure: llama.cpp could not initialise the model
        """
        model_path = self.model_path
        if not model_path.exists():
            raise ModelNotFound(
                f"Model not found at {model_path}. Please download the model first.")

        logger.info(f"Loading LLM model from: {model_path}")
        with self._lock:
            try:
                model = Llama(model_path=str(model_path), n_ctx=self.n_ctx, verbose=False)
                stop_tokens = self._end_of_generation_tokens(model)
            except Exception as e:
                logger.error(f"Failed to load LLM model: {e}")
                raise LoadFailure(f"Failed to load LLM model: {e}") from e

            if self._model is not None:
                logger.info("Replacing previously loaded LLM model")
            self._model = model
            self._stop_tokens = stop_tokens

        logger.info("LLM model loaded successfully")

    @staticmethod
    def _end_of_generation_tokens(model: Llama) -> Set[int]:
        stop_tokens = {model.token_eos()}
        end_of_turn = model.tokenize(END_OF_TURN.encode("utf-8"), add_bos=False, special=True)
        if len(end_of_turn) == 1:
            stop_tokens.add(end_of_turn[0])
        return stop_tokens

    def is_available(self) -> bool:
        with self._lock:
            return self._model is not None

    def cleanup(self, text: str, mode: str = "basic", custom_prompt: Optional[str] = None) -> str:
        """Rewrite text in the given mode.

        Raises:
            NotLoaded: load() has not succeeded yet
            TokenizationFailure: The prompt could not be tokenized
            DecodeFailure: llama.cpp failed while evaluating or sampling
        """
        with self._lock:
            if self._model is None:
                raise NotLoaded("LLM model not loaded")

            prompt = build_cleanup_prompt(text, mode, custom_prompt)
            return self._generate(self._model, prompt)

    def _generate(self, model: Llama, prompt: str) -> str:
        try:
            tokens = model.tokenize(prompt.encode("utf-8"), add_bos=True, special=True)
        except Exception as e:
            raise TokenizationFailure(f"Failed to tokenize: {e}") from e

        logger.debug(f"LLM: Processing {len(tokens)} tokens")

        model.reset()
        try:
            model.eval(tokens)
        except Exception as e:
            raise DecodeFailure(f"Failed to decode prompt: {e}") from e

        generated = bytearray()
        for _ in range(self.max_new_tokens):
            try:
                token = model.sample(temp=0.0)
            except Exception as e:
                raise DecodeFailure(f"Failed to sample: {e}") from e

            if token in self._stop_tokens:
                break

            generated += model.detokenize([token])
            try:
                model.eval([token])
            except Exception as e:
                raise DecodeFailure(f"Failed to decode: {e}") from e

        result = generated.decode("utf-8", errors="ignore").strip()
        logger.debug(f"LLM: Generated {len(result)} chars")
        return result
