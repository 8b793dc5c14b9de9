import argparse, glob, json, logging, os, re, sys

from wsdlgraph.errors import WsdlGraphError
from wsdlgraph.options import ParserOptions
from wsdlgraph.wsdl import load_wsdl

logger = logging.getLogger(__name__)

def build_parser():
    ap = argparse.ArgumentParser(prog='wsdlgraph',
                                 description='Resolve WSDL files into a graph of named definitions and methods.')
    ap.add_argument('paths', nargs='+', help='WSDL files, glob patterns or http(s) URLs')
    ap.add_argument('-o', '--output', help='Directory for <Name>.json graph dumps')
    ap.add_argument('--name-prefix', default='', help='Prefix for generated definition names')
    ap.add_argument('--name-suffix', default='', help='Suffix for generated definition names')
    ap.add_argument('--max-name-collision-retries', type=int, default=ParserOptions.max_name_collision_retries,
                    help='Maximum count of definitions with the same name but an increased suffix')
    ap.add_argument('--case-insensitive-names', action='store_true',
                    help='Compare definition names case-insensitively')
    ap.add_argument('--property-naming', choices=['camelCase', 'PascalCase'], help='Rename definition properties')
    ap.add_argument('-v', '--verbose', action='store_true', help='Print debug logs')
    ap.add_argument('-q', '--quiet', action='store_true', help='Suppress all logs')
    return ap

def configure_logging(verbose=False, quiet=False):
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    if quiet:
        level = logging.CRITICAL
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s', force=True)

def expand_paths(patterns):
    paths = []
    for pattern in patterns:
        if re.match(r'^https?://', pattern, re.I):
            paths.append(pattern)
            continue
        matches = []
        for match in sorted(glob.glob(pattern, recursive=True)):
            if os.path.isfile(match):
                matches.append(match)
            else:
                logger.warning('Skipping %s, not a file', match)
        if not matches:
            logger.error('No WSDL files found for %s', pattern)
        paths.extend(matches)
    return paths

def write_graph(parsed, output):
    os.makedirs(output, exist_ok=True)
    filename = os.path.join(output, '{}.json'.format(parsed.name or 'Wsdl'))
    with open(filename, 'w', encoding='utf-8') as f:
        json.dump(parsed.as_dict(), f, indent=2)
    logger.info('Wrote %s', filename)
    return filename

def main(argv=None):
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose, args.quiet)
    try:
        options = ParserOptions(name_prefix=args.name_prefix,
                                name_suffix=args.name_suffix,
                                max_name_collision_retries=args.max_name_collision_retries,
                                case_insensitive_names=args.case_insensitive_names,
                                property_naming=args.property_naming)
    except ValueError as err:
        logger.error('%s', err)
        return 2
    logger.debug('Options: %r', options)

    paths = expand_paths(args.paths)
    if not paths:
        logger.error('No WSDL files found')
        return 1
    logger.info('Found %d WSDL files', len(paths))

    errors = 0
    for path in paths:
        logger.info('Resolving %s', path)
        try:
            parsed = load_wsdl(path, options)
        except WsdlGraphError as err:
            # the document is dropped, the batch goes on
            logger.error('Error occurred while resolving %s: %s', path, err)
            errors += 1
            continue
        if args.output:
            write_graph(parsed, args.output)
        else:
            logger.info('%s: %d services, %d ports, %d methods, %d definitions', parsed.name, len(parsed.services),
                        len(parsed.ports), len(parsed.methods), len(parsed.definitions))

    if errors:
        logger.error('%d errors occurred', errors)
        return 1
    return 0

if __name__ == '__main__':
    sys.exit(main())
