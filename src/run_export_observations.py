#!/usr/bin/env python3
from __future__ import annotations

import logging
import sys

import click
import psycopg

from omobs.common import OBS_TYPE_MEASUREMENT, setup_logging
from omobs.constellation import ObservationConstellation
from omobs.observation import Observation
from omobs.streaming import DatabaseStreamingValue

logger = logging.getLogger("export-observations")


def make_template(
    procedure: str, observed_property: str, observation_type: str
) -> Observation:
    constellation = ObservationConstellation(
        procedure, observed_property, None, observation_type
    )
    return Observation(
        identifier=f"{procedure}/{observed_property}", constellation=constellation
    )


@click.command()
@click.help_option("--help", "-h")
@click.option("--dsn", required=True, envvar="DATABASE_DSN", help="Observation DB")
@click.option("--schema", required=True, help="Schema of the thing's project")
@click.option("--datastream-id", required=True, type=int, help="STA datastream id")
@click.option("--procedure", default="unknown", help="Procedure identifier")
@click.option("--observed-property", default="unknown", help="Observed property")
@click.option("--observation-type", default=OBS_TYPE_MEASUREMENT)
@click.option("--start", default=None, help="ISO start date (inclusive)")
@click.option("--end", default=None, help="ISO end date (inclusive)")
@click.option("--fetch-size", default=None, type=int)
@click.option("--log-level", default="INFO", envvar="LOG_LEVEL")
def main(
    dsn,
    schema,
    datastream_id,
    procedure,
    observed_property,
    observation_type,
    start,
    end,
    fetch_size,
    log_level,
):
    """Print the observations of one datastream as CSV time series."""
    setup_logging(log_level)
    template = make_template(procedure, observed_property, observation_type)

    with psycopg.connect(dsn) as conn:
        stream = DatabaseStreamingValue(
            conn,
            schema,
            datastream_id,
            template,
            start_date=start,
            end_date=end,
            fetch_size=fetch_size,
        )
        with stream:
            observation = stream.merge_observation()

    series = observation.value.value.to_series()
    logger.info(
        "exporting %s values of datastream %s (unit: %s)",
        len(series),
        datastream_id,
        observation.value.unit,
    )
    series.to_csv(sys.stdout, header=["value"], index_label="phenomenon_time")


if __name__ == "__main__":
    main()
