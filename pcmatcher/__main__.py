'''
CLI interface for the matcher
'''

import argparse
import csv
import logging
import os
import sys
import time

from .core import Matcher, MatcherStatus, SOLVER_MAP
from .records import Round
from .report import assignment_rows, detail_rows, PREFERENCE_LABELS

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(prog='pcmatcher')
    parser.add_argument(
        '--pcinfo',
        required=True,
        help='''
            PC member file with a header row containing at least
            email, roles, tags, given_name and family_name.
            '''
    )
    parser.add_argument(
        '--papers',
        required=True,
        help='Paper file with a header row containing ID, Title and Status.'
    )
    parser.add_argument(
        '--prefs',
        required=True,
        help='''
            Preference file with a header row containing
            email, paper, topic_score, preference and conflict.
            '''
    )
    parser.add_argument(
        '--tpms',
        required=True,
        help='''
            External score file without a header,
            each row containing comma-separated paperID, identity and score (in that order).
            e.g. "12,reviewer@example.org,0.5"
            '''
    )
    parser.add_argument(
        '--aliases',
        required=True,
        help='Alias file with a header row containing tpms_email and alias_email.'
    )
    parser.add_argument(
        '--conflicts',
        help='Optional PC conflict file with a header row containing email and conflict_email.'
    )
    parser.add_argument('--round', default=Round.R1.value, choices=[r.value for r in Round])
    parser.add_argument('--solver', default='Greedy', choices=list(SOLVER_MAP))
    parser.add_argument(
        '--r2_num_reviews',
        type=int,
        help='Reviews required per paper in round R2 (defaults to the R1 count).'
    )
    parser.add_argument('--time_limit', type=float, help='Solver time limit in seconds.')
    parser.add_argument('--output_dir', default='.')
    parser.add_argument('--log_file', default='pcmatcher.log')
    return parser


def read_records(path):
    with open(path, newline='') as file_handle:
        return [
            {
                key.strip(): value.strip() if isinstance(value, str) else value
                for key, value in row.items()
                if key
            }
            for row in csv.DictReader(file_handle)
        ]


def read_rows(path):
    with open(path, newline='') as file_handle:
        return [
            [value.strip() for value in row]
            for row in csv.reader(file_handle)
            if row
        ]


def write_rows(path, rows, fieldnames):
    with open(path, 'w', newline='') as file_handle:
        writer = csv.DictWriter(file_handle, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)


def configure_logging(log_file):
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    log_format = '%(asctime)s %(levelname)s: [in %(pathname)s:%(lineno)d] %(message)s'
    logging.basicConfig(filename=log_file, format=log_format)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    root_logger.addHandler(console_handler)


def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file)

    t0 = time.time()
    logger.info('Starting time={}'.format(t0))

    match_data = {
        'reviewers': read_records(args.pcinfo),
        'papers': read_records(args.papers),
        'preferences': read_records(args.prefs),
        'external_scores': read_rows(args.tpms),
        'aliases': read_records(args.aliases),
        'conflicts': read_records(args.conflicts) if args.conflicts else [],
        'round_id': args.round,
        'r2_num_reviews': args.r2_num_reviews,
        'time_limit': args.time_limit,
    }

    matcher = Matcher(
        datasource=match_data,
        solver_class=args.solver,
        logger=logger
    )
    result = matcher.run()

    if matcher.get_status() != MatcherStatus.COMPLETE.value:
        logger.error('{}: {}'.format(matcher.get_status(), matcher.message))
        return 1

    os.makedirs(args.output_dir, exist_ok=True)

    rows = assignment_rows(result.assignments, result.round)
    assignments_path = os.path.join(
        args.output_dir, 'assignments-{}.csv'.format(result.round.value))
    if result.round is Round.DL:
        fieldnames = ['paper', 'action', 'email']
    else:
        fieldnames = ['paper', 'assignment', 'email', 'round']
    write_rows(assignments_path, rows, fieldnames)

    details = detail_rows(
        result.assignments, result.score_cells, result.reviewers, result.papers)
    details_path = os.path.join(
        args.output_dir, 'assignment-details-{}.csv'.format(result.round.value))
    write_rows(details_path, details, [
        'paper', 'email', 'score', 'preference', 'norm_topic_score',
        'tpms_score', 'pc_name', 'paper_title'])

    summary = result.summary
    logger.info('Total assignments={}'.format(summary['total_assignments']))
    logger.info('Average score={:.3f}'.format(summary['mean_score']))
    for load, count in summary['load_distribution'].items():
        logger.info('{} reviews: {} PC members'.format(load, count))
    for preference, count in summary['preference_distribution'].items():
        logger.info('{} ({}): {} assignments'.format(
            PREFERENCE_LABELS[preference], preference, count))

    logger.info('Wrote {} and {}'.format(assignments_path, details_path))
    logger.info('Overall execution time: {0} seconds'.format(time.time() - t0))
    return 0


if __name__ == '__main__':
    sys.exit(main())
