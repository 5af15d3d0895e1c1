"""perfsight I/O: metric files in, MetricSamples out."""

from perfsight.io.reader import load_metric_frame, samples_by_metric, samples_from_records
