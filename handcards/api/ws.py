from fastapi import APIRouter, WebSocket, WebSocketDisconnect
import asyncio
import time
import os
import logging
import concurrent.futures

from .deps import review_for_app, review_state
from ..ml.classifier import describe
from ..ml.landmarks import LandmarkFrame
from ..review.models import Step
from ..review.scheduler import RATING_FOR_GESTURE

router = APIRouter()

DEBUG_WS = os.getenv("HANDCARDS_WS_DEBUG", "0") == "1"

logger = logging.getLogger("handcards.ws")


def landmarker_factory(options):
    # mediapipe/cv2 are only needed once a client streams raw images
    from ..ml.landmarker import HandLandmarkerSession
    return HandLandmarkerSession(options)


def decode_image(data_url: str):
    from ..ml.landmarker import decode_frame_bgr
    return decode_frame_bgr(data_url)


@router.websocket("/ws/gesture")
async def gesture_ws(ws: WebSocket):
    await ws.accept()

    review = review_for_app(ws.app)
    config = review.hold.config

    alive = True
    last_ping = time.monotonic()

    # one slot: always the latest message, never a backlog
    q: asyncio.Queue = asyncio.Queue(maxsize=1)

    frames_in = 0
    frames_dropped = 0
    decode_err = 0
    processed = 0
    last_debug = 0.0

    def push(msg):
        nonlocal frames_dropped
        if q.full():
            frames_dropped += 1
            try:
                q.get_nowait()
            except asyncio.QueueEmpty:
                pass
        q.put_nowait(msg)

    async def receiver():
        nonlocal alive, frames_in
        try:
            while True:
                try:
                    msg = await ws.receive_json()
                except ValueError:
                    continue
                if not isinstance(msg, dict) or msg.get("type") not in ("frame", "landmarks", "no_hand"):
                    continue
                frames_in += 1
                push(msg)
        except (WebSocketDisconnect, RuntimeError):
            alive = False
            push({"type": "closed"})

    async def pinger():
        nonlocal last_ping, alive
        try:
            while alive:
                now = time.monotonic()
                if (now - last_ping) > config.ping_interval_s:
                    last_ping = now
                    try:
                        await ws.send_json({"type": "ping"})
                    except Exception:
                        alive = False
                        break
                await asyncio.sleep(0.25)
        except asyncio.CancelledError:
            return

    # the landmarker lives in (and is only ever called from) one worker thread
    loop = asyncio.get_running_loop()
    executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
    landmarker = None
    landmarker_failed = False

    recv_task = asyncio.create_task(receiver())
    ping_task = asyncio.create_task(pinger())

    try:
        last_processed = None
        min_interval_s = max(0.0, config.infer_every_ms / 1000.0)

        while alive:
            try:
                msg = await asyncio.wait_for(q.get(), timeout=1.0)
            except asyncio.TimeoutError:
                continue

            kind = msg.get("type")
            if kind == "closed":
                break

            now = time.monotonic()
            if last_processed is not None and (now - last_processed) < min_interval_s:
                continue
            last_processed = now
            ts_ms = now * 1000.0

            frame = None
            if kind == "landmarks":
                frame = LandmarkFrame.from_points(msg.get("points"))
            elif kind == "frame" and isinstance(msg.get("data"), str) and not landmarker_failed:
                try:
                    if landmarker is None:
                        landmarker = await loop.run_in_executor(executor, landmarker_factory, config.landmarker)
                    image = decode_image(msg["data"])
                    frame = await loop.run_in_executor(executor, landmarker.process_frame_bgr, image, int(ts_ms))
                except FileNotFoundError as e:
                    landmarker_failed = True
                    logger.error("hand landmarker unavailable: %s", e)
                    await ws.send_json({"type": "error", "detail": str(e)})
                except Exception:
                    # bad image or inference failure: same as no hand
                    decode_err += 1
                    frame = None

            processed += 1
            if review.state.step != Step.ANSWER:
                continue

            confirmed = review.on_frame(frame, ts_ms)

            if confirmed is not None:
                rating = RATING_FOR_GESTURE.get(confirmed)
                await ws.send_json({
                    "type": "confirmed",
                    "symbol": confirmed.value,
                    "rating": rating.value if rating else None,
                    "review": review_state(review),
                })
            else:
                payload = {
                    "type": "hold",
                    "symbol": review.current_symbol.value,
                    "progress": review.progress,
                    "step": review.state.step.value,
                }
                if DEBUG_WS:
                    payload["debug"] = describe(frame, config)
                await ws.send_json(payload)

            if DEBUG_WS and (now - last_debug) > 1.0:
                last_debug = now
                logger.info(
                    f"frames_in={frames_in} dropped={frames_dropped} "
                    f"decode_err={decode_err} processed={processed} "
                    f"symbol={review.current_symbol.value} progress={review.progress:.2f}"
                )

    except WebSocketDisconnect:
        pass
    finally:
        alive = False

        recv_task.cancel()
        ping_task.cancel()
        await asyncio.gather(recv_task, ping_task, return_exceptions=True)

        if landmarker is not None:
            try:
                await loop.run_in_executor(executor, landmarker.close)
            except Exception:
                logger.exception("closing hand landmarker failed")
        executor.shutdown(wait=False)
