"""Redis Streams source for feature frames

Lets feature extraction run out of process: an extractor publishes frames to a
Redis Stream, and RedisFeatureSource consumes them into an EmotionSession,
publishing every live and final mood estimate to a second stream.

Wire format (feature stream):
    Frame entries carry the scalar features as decimal strings (a field is
    omitted when missing) and 'mfcc' as comma-separated decimals. Control
    entries carry an 'event' field instead: 'start' or 'stop'.

Wire format (mood stream):
    'mood' (Mood value), 'is_final' ('1' or '0'), 'frame_count', 'timestamp'.
"""

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional

import redis.asyncio as redis

from voicemood.analysis.session import EmotionSession
from voicemood.config.config_loader import config
from voicemood.models.features import FeatureFrame, SCALAR_FEATURES, as_number
from voicemood.models.results import MoodEstimate


logger = logging.getLogger(__name__)


EVENT_START = "start"
EVENT_STOP = "stop"


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode('utf-8')
    return str(value)


def _parse_number(raw: Any) -> Optional[float]:
    try:
        return as_number(float(_text(raw)))
    except ValueError:
        return None


def serialize_frame(frame: FeatureFrame) -> Dict[str, str]:
    """Encode a frame as Redis stream fields"""
    data = {
        name: repr(float(getattr(frame, name)))
        for name in SCALAR_FEATURES
        if as_number(getattr(frame, name)) is not None
    }
    if frame.mfcc is not None:
        coefficients = [as_number(c) for c in frame.mfcc]
        if all(c is not None for c in coefficients):
            data['mfcc'] = ",".join(repr(c) for c in coefficients)
    return data


def deserialize_frame(data: Mapping[Any, Any]) -> FeatureFrame:
    """Decode Redis stream fields into a frame.

    Unparseable scalars become None; an MFCC list with any unparseable
    coefficient is dropped entirely.
    """
    fields = {_text(key): value for key, value in data.items()}
    values: Dict[str, Any] = {
        name: _parse_number(fields[name])
        for name in SCALAR_FEATURES
        if name in fields
    }

    raw_mfcc = fields.get('mfcc')
    if raw_mfcc is not None:
        text = _text(raw_mfcc)
        coefficients = [_parse_number(part) for part in text.split(",")] if text else []
        if coefficients and all(c is not None for c in coefficients):
            values['mfcc'] = tuple(coefficients)

    return FeatureFrame(**values)


class RedisFeatureSource:
    """Feeds an EmotionSession from a Redis Stream of feature frames.

    Attributes:
        session: Session receiving frames and control events
        redis_url: Redis connection URL
        feature_stream: Stream the extractor publishes frames to
        mood_stream: Stream mood estimates are published to
        redis_client: Async Redis client (created on first use)
    """

    def __init__(
        self,
        session: EmotionSession,
        redis_url: Optional[str] = None,
        feature_stream: Optional[str] = None,
        mood_stream: Optional[str] = None,
    ):
        self.session = session
        self.redis_url = redis_url or config.get('redis.url', 'redis://localhost:6379')
        self.feature_stream = feature_stream or config.get('redis.feature_stream', 'voice_features')
        self.mood_stream = mood_stream or config.get('redis.mood_stream', 'voice_moods')
        self.block_ms = config.get('redis.block_ms', 100)
        self.maxlen = config.get('redis.maxlen', 1000)
        self.redis_client: Optional[redis.Redis] = None

    def _client(self) -> redis.Redis:
        if self.redis_client is None:
            self.redis_client = redis.from_url(self.redis_url)
            logger.info(f"Connected to Redis at {self.redis_url}")
        return self.redis_client

    async def publish_frame(self, frame: FeatureFrame) -> None:
        """Publish one feature frame (producer side)"""
        await self._client().xadd(self.feature_stream, serialize_frame(frame), maxlen=self.maxlen)

    async def publish_event(self, event: str) -> None:
        """Publish a 'start' or 'stop' control event (producer side)"""
        if event not in (EVENT_START, EVENT_STOP):
            raise ValueError(f"Unknown session event: {event}")
        await self._client().xadd(self.feature_stream, {'event': event}, maxlen=self.maxlen)

    async def publish_estimate(self, estimate: MoodEstimate) -> None:
        """Publish a mood estimate to the mood stream"""
        try:
            await self._client().xadd(
                self.mood_stream,
                {
                    'mood': estimate.mood.value,
                    'is_final': '1' if estimate.is_final else '0',
                    'frame_count': estimate.frame_count,
                    'timestamp': estimate.timestamp,
                },
                maxlen=self.maxlen,
            )
            logger.debug(f"Published {'final' if estimate.is_final else 'live'} mood {estimate.mood}")
        except Exception as e:
            logger.error(f"Failed to publish mood estimate: {e}")

    async def handle_message(self, data: Mapping[Any, Any]) -> Optional[MoodEstimate]:
        """Dispatch one feature-stream entry to the session.

        Returns:
            The estimate the entry produced, if any
        """
        fields = {_text(key): value for key, value in data.items()}
        event = fields.get('event')

        if event is not None:
            event = _text(event)
            if event == EVENT_START:
                self.session.start()
                return None
            if event == EVENT_STOP:
                estimate = self.session.stop()
            else:
                logger.warning(f"Ignoring unknown session event: {event}")
                return None
        else:
            estimate = self.session.add_frame(deserialize_frame(fields))

        if estimate is not None:
            await self.publish_estimate(estimate)
        return estimate

    async def start(self):
        """Consume the feature stream until cancelled.

        An entry whose handling fails is logged and skipped. Read errors are
        logged and the loop backs off briefly; errors while connecting
        propagate.
        """
        try:
            client = self._client()
            last_id = '0-0'  # Start from beginning
            logger.info(f"Starting to consume from stream: {self.feature_stream}")

            while True:
                try:
                    messages = await client.xread(
                        {self.feature_stream: last_id},
                        block=self.block_ms,
                        count=100
                    )

                    if messages:
                        for stream_name, message_list in messages:
                            for message_id, data in message_list:
                                last_id = message_id
                                try:
                                    await self.handle_message(data)
                                except Exception as e:
                                    logger.error(
                                        f"Skipping feature entry {_text(message_id)}: {e}",
                                        exc_info=True
                                    )

                except asyncio.CancelledError:
                    logger.info("Redis feature source cancelled")
                    break
                except Exception as e:
                    logger.error(f"Error processing feature frame: {e}", exc_info=True)
                    await asyncio.sleep(0.1)  # Back off on error

        except Exception as e:
            logger.error(f"Fatal error in Redis feature source: {e}", exc_info=True)
            raise
        finally:
            await self.close()

    async def close(self) -> None:
        """Close the Redis connection"""
        if self.redis_client:
            await self.redis_client.close()
            self.redis_client = None
            logger.info("Redis connection closed")
