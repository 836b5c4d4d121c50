"""Command line entry point: generate a bulk-import CSV from local files."""

import argparse
import logging
import sys
from pathlib import Path

from campaign_export.config import load_config_from_env
from campaign_export.directory import FileLocationDirectory
from campaign_export.errors import CampaignExportError, InputError
from campaign_export.jobs import GenerationJobManager
from campaign_export.models import JobStatus
from campaign_export.processors.data_loader import load_campaign
from campaign_export.utils.cache import LocationCache

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Generate a Meta bulk-import CSV for locations x ad variants'
    )
    parser.add_argument('--locations', type=Path, required=True,
                        help='Locations file (.json, .csv or .xlsx)')
    parser.add_argument('--campaign', type=Path, required=True,
                        help='Campaign JSON file, including its "ads" list')
    parser.add_argument('--output', type=Path, required=True, help='Where to write the CSV')
    parser.add_argument('--targeting', type=Path, help='Optional targeting config file (.json or .csv)')
    parser.add_argument('--location-id', action='append', dest='location_ids', default=[],
                        help='Location id to include (repeatable; default: all locations)')
    parser.add_argument('--file-name', type=str, help='File name recorded on the job')
    parser.add_argument('--log-level', type=str, help='Override LOG_LEVEL')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config_from_env()
    except RuntimeError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=(args.log_level or config.log_level).upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    # The CLI has no polling client, so skip the progress delay
    config.generation.tick_interval = 0

    try:
        directory = FileLocationDirectory(
            locations_file=args.locations,
            targeting_file=args.targeting,
            cache=LocationCache(ttl_seconds=0),
            excluded_codes=config.directory.excluded_codes,
        )
        campaign = load_campaign(args.campaign)

        location_ids = args.location_ids or [loc.id for loc in directory.list_locations()]
        manager = GenerationJobManager(directory, config.generation)

        job = manager.submit(location_ids, campaign.ads, campaign, file_name_hint=args.file_name)
        snapshot = manager.run_job(job.id)

        if snapshot.status != JobStatus.COMPLETED:
            logger.error(f"Job {snapshot.id} failed: {snapshot.error}")
            return 1

        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_bytes(manager.download(snapshot.id))

        print(f"Wrote {snapshot.total_records} rows to {args.output}")
        return 0

    except InputError as e:
        logger.error("Invalid input:")
        for problem in e.problems:
            logger.error(f"  - {problem}")
        return 1
    except (CampaignExportError, OSError, ValueError) as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == '__main__':
    sys.exit(main())
