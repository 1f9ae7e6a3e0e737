from prometheus_client import Counter, Gauge


class BroadcastMetrics:
    """
    Seat update stream metrics

    Exposed on /metrics; one process-wide instance since prometheus_client
    registers collectors globally.
    """

    def __init__(self):
        self.active_subscribers = Gauge(
            'seat_stream_active_subscribers',
            'Event stream subscribers currently registered in the hub',
        )

        self.frames_delivered = Counter(
            'seat_stream_frames_delivered_total',
            'Frames handed to subscriber channels',
            ['frame_type'],  # frame_type: event/keepalive
        )

        self.delivery_failures = Counter(
            'seat_stream_delivery_failures_total',
            'Failed deliveries that deregistered a subscriber',
            ['reason'],  # reason: buffer_full/closed
        )

        self.seat_writes = Counter(
            'seat_writes_total',
            'Seat mutations by operation and result',
            ['operation', 'result'],  # operation: upsert/clear
        )

    def record_delivery(self, *, frame_type: str, delivered: int) -> None:
        if delivered:
            self.frames_delivered.labels(frame_type=frame_type).inc(delivered)

    def record_delivery_failure(self, *, reason: str) -> None:
        self.delivery_failures.labels(reason=reason).inc()

    def record_seat_write(self, *, operation: str, result: str) -> None:
        self.seat_writes.labels(operation=operation, result=result).inc()


# Global metrics instance
metrics = BroadcastMetrics()
