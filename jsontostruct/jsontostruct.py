"""

Command line utility to infer Go struct definitions from sample JSON documents.

"""

import argparse
import logging
import sys

from jsontostruct import _version
from jsontostruct.config import GeneratorConfig, MergeStrategy
from jsontostruct.jsontogo import InputError, SampleReader, StructGenerator, iter_file_samples
from jsontostruct.progress import StreamProgress
from jsontostruct.resolvedtype import FieldOrder
from jsontostruct.structtogo import RenderError


def create_parser():
    """Create the argument parser."""
    parser = argparse.ArgumentParser(description='Infer Go struct definitions from JSON, JSON arrays or JSON lines.')
    parser.add_argument('input', nargs='*', help='JSON input files; standard input is read when omitted.')
    parser.add_argument('--out', type=str, help='Write the Go source to this file instead of standard output.')
    parser.add_argument('--name', type=str, default='Document', help='Name of the root struct.')
    parser.add_argument('--pkg', type=str, default='main', help='Go package name.')
    parser.add_argument('--omitempty', dest='omit_empty', action='store_true', default=True,
                        help='Add omitempty to every json tag (default).')
    parser.add_argument('--no-omitempty', dest='omit_empty', action='store_false',
                        help='Do not add omitempty to json tags.')
    parser.add_argument('--field-order', type=str, default=FieldOrder.ALPHABETICAL.value,
                        choices=[o.value for o in FieldOrder], help='Order of fields within each struct.')
    parser.add_argument('--extract-structs', action='store_true',
                        help='Extract repeated nested structures into named types.')
    parser.add_argument('--stat-comments', action='store_true',
                        help='Annotate fields with statistics gathered from the samples.')
    parser.add_argument('--stream', action='store_true',
                        help='Show the struct inferred so far while input is processed.')
    parser.add_argument('--update-interval', type=int, default=500,
                        help='Maximum milliseconds between stream updates.')
    parser.add_argument('--merge-strategy', type=str, default=MergeStrategy.STATISTICS.value,
                        choices=[s.value for s in MergeStrategy], help='How samples are combined.')
    parser.add_argument('--sample-size', type=int, default=0,
                        help='Maximum number of samples to read; 0 reads all.')
    parser.add_argument('--template-dir', type=str, help='Directory with templates overriding the built-in ones.')
    parser.add_argument('--no-gofmt', dest='gofmt', action='store_false', help='Do not run gofmt over the output.')
    parser.add_argument('--verbose', action='store_true', help='Log progress to standard error.')
    parser.add_argument('--version', action='store_true', help='Print the version of jsontostruct.')
    return parser


def config_from_args(args) -> GeneratorConfig:
    """Build the generator configuration from parsed arguments."""
    return GeneratorConfig(
        type_name=args.name,
        package_name=args.pkg,
        omit_empty=args.omit_empty,
        field_order=args.field_order,
        extract_structs=args.extract_structs,
        stat_comments=args.stat_comments,
        merge_strategy=args.merge_strategy,
        sample_size=args.sample_size,
        template_dir=args.template_dir,
        gofmt=args.gofmt,
        update_interval_ms=args.update_interval,
    )


def main():
    """Main function for the command line utility."""
    parser = create_parser()
    args = parser.parse_args()

    if args.version:
        print(f'jsontostruct {_version.version}')
        return

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s', stream=sys.stderr)

    try:
        config = config_from_args(args)
        generator = StructGenerator(config)
        if args.input:
            samples = iter_file_samples(args.input, config.sample_size)
        else:
            samples = SampleReader(sys.stdin.read(), config.sample_size)

        if args.stream and not args.out:
            progress = StreamProgress(sys.stdout, config.update_interval_ms)
            generator.generate_stream(samples, progress)
            return

        result = generator.build(samples)
        source = generator.render(result)
        if args.out:
            with open(args.out, 'w', encoding='utf-8') as f:
                f.write(source)
        else:
            sys.stdout.write(source)
    except RenderError as e:
        print("Error: ", str(e))
        if e.source:
            print(e.excerpt())
        sys.exit(1)
    except (InputError, ValueError, OSError) as e:
        print("Error: ", str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
