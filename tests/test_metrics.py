"""Tests for Prometheus metrics."""

from motion_synth.metrics import MetricsCollector


class TestMetricsCollector:
    def test_record_gesture(self):
        m = MetricsCollector()
        m.record_gesture("shake")
        m.record_gesture("shake")
        m.record_gesture("flip_over")
        assert m.gesture_counts == {"shake": 2, "flip_over": 1}

    def test_record_sample(self):
        m = MetricsCollector()
        m.record_sample(0.00002)
        m.record_sample(0.0002)
        assert m.samples_total == 2

    def test_render_prometheus_format(self):
        m = MetricsCollector()
        m.record_gesture("twist")
        m.record_debounced("twist")
        m.record_playback_failure()
        m.record_sample(0.0001)
        m.engine_started()
        m.set_connections(2)

        output = m.render()
        assert 'motion_synth_gestures_total{gesture="twist"} 1' in output
        assert 'motion_synth_debounced_total{gesture="twist"} 1' in output
        assert "motion_synth_playback_failures_total 1" in output
        assert "motion_synth_samples_total 1" in output
        assert "motion_synth_running 1" in output
        assert "motion_synth_active_connections 2" in output
        assert "# HELP" in output
        assert "# TYPE" in output

    def test_histogram_is_cumulative(self):
        m = MetricsCollector()
        for _ in range(5):
            m.record_sample(0.00003)
        m.record_sample(1.0)
        output = m.render()
        assert 'motion_synth_recognition_latency_seconds_bucket{le="5e-05"} 5' in output
        assert 'motion_synth_recognition_latency_seconds_bucket{le="0.01"} 5' in output
        assert 'motion_synth_recognition_latency_seconds_bucket{le="+Inf"} 6' in output
        assert "motion_synth_recognition_latency_seconds_count 6" in output

    def test_running_gauge_counts_engines(self):
        m = MetricsCollector()
        m.engine_started()
        m.engine_started()
        m.engine_stopped()
        assert m.running_engines == 1
        assert "motion_synth_running 1" in m.render()

        m.engine_stopped()
        m.engine_stopped()
        assert m.running_engines == 0
