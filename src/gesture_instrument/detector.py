from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import cv2

from .model_assets import ensure_hand_landmarker_task
from .types import Landmark

logger = logging.getLogger(__name__)


DFLT_TASKS_MODEL_PATH = "models/hand_landmarker.task"
FRAME_INTERVAL_MS = 33  # ~30fps timestamps for the Tasks VIDEO mode


@dataclass(frozen=True)
class _SolutionsBackend:
    hands: object


@dataclass(frozen=True)
class _TasksBackend:
    mp: object
    landmarker: object


def _try_create_solutions_backend(
    model_complexity: int,
    min_detection_confidence: float,
    min_tracking_confidence: float,
) -> Optional[_SolutionsBackend]:
    import mediapipe as mp  # type: ignore

    if not hasattr(mp, "solutions"):
        return None
    hands = mp.solutions.hands.Hands(
        static_image_mode=False,
        max_num_hands=1,
        model_complexity=model_complexity,
        min_detection_confidence=min_detection_confidence,
        min_tracking_confidence=min_tracking_confidence,
    )
    return _SolutionsBackend(hands=hands)


def _create_tasks_backend(
    model_path: str,
    min_detection_confidence: float,
    min_tracking_confidence: float,
) -> _TasksBackend:
    """HandLandmarker (Tasks API) for MediaPipe builds without `mp.solutions`."""
    import mediapipe as mp  # type: ignore
    from mediapipe.tasks.python import BaseOptions  # type: ignore
    from mediapipe.tasks.python.vision import HandLandmarker, HandLandmarkerOptions, RunningMode  # type: ignore

    options = HandLandmarkerOptions(
        base_options=BaseOptions(model_asset_path=ensure_hand_landmarker_task(model_path)),
        running_mode=RunningMode.VIDEO,
        num_hands=1,
        min_hand_detection_confidence=min_detection_confidence,
        min_tracking_confidence=min_tracking_confidence,
    )
    return _TasksBackend(mp=mp, landmarker=HandLandmarker.create_from_options(options))


def _to_landmarks(raw) -> List[Landmark]:
    return [Landmark(x=float(lm.x), y=float(lm.y), z=float(getattr(lm, "z", 0.0))) for lm in raw]


class HandLandmarkSource:
    """
    Single-hand MediaPipe landmark source.

    ``detect`` takes a **BGR** frame (OpenCV default) and returns the 21
    landmarks of the first detected hand, or None when no hand is visible.
    """

    def __init__(
        self,
        model_complexity: int = 1,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        tasks_model_path: str = DFLT_TASKS_MODEL_PATH,
    ) -> None:
        self._solutions = _try_create_solutions_backend(
            model_complexity=model_complexity,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self._tasks: Optional[_TasksBackend] = None
        self._timestamp_ms = 0

        if self._solutions is None:
            logger.info("mediapipe has no `solutions`; using the Tasks HandLandmarker")
            try:
                self._tasks = _create_tasks_backend(
                    model_path=tasks_model_path,
                    min_detection_confidence=min_detection_confidence,
                    min_tracking_confidence=min_tracking_confidence,
                )
            except (ImportError, AttributeError) as e:
                raise RuntimeError(
                    "Could not initialize MediaPipe hand tracking: the installed `mediapipe` exposes\n"
                    "neither `mp.solutions` nor the Tasks HandLandmarker API."
                ) from e

    def close(self) -> None:
        if self._solutions is not None:
            self._solutions.hands.close()
        if self._tasks is not None:
            self._tasks.landmarker.close()

    def __enter__(self) -> "HandLandmarkSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def detect(self, frame_bgr) -> Optional[List[Landmark]]:
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)

        if self._solutions is not None:
            results = self._solutions.hands.process(frame_rgb)
            if not results.multi_hand_landmarks:
                return None
            return _to_landmarks(results.multi_hand_landmarks[0].landmark)

        mp = self._tasks.mp
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)

        # VIDEO mode requires monotonically increasing timestamps.
        self._timestamp_ms += FRAME_INTERVAL_MS
        result = self._tasks.landmarker.detect_for_video(mp_image, self._timestamp_ms)

        hand_landmarks = getattr(result, "hand_landmarks", None) or []
        if not hand_landmarks:
            return None
        return _to_landmarks(hand_landmarks[0])
