"""Compress files to NAME.hh with static Huffman coding, or expand them back."""

import argparse
import os
import sys

from bitio import UnderflowError
from huffman import HuffmanError, huffman_encode, huffman_decode


COMPRESSED_SUFFIX = '.hh'
EXPANDED_SUFFIX = '.out'


def compressed_name(path):
    return path + COMPRESSED_SUFFIX


def expanded_name(path):
    if path.endswith(COMPRESSED_SUFFIX) and len(path) > len(COMPRESSED_SUFFIX):
        return path[:-len(COMPRESSED_SUFFIX)]
    return path + EXPANDED_SUFFIX


def compress_file(src, dst, verbose=False):
    with open(src, 'rb') as f:
        data = f.read()
    if verbose:
        print(f'Encoding {src}...', file=sys.stderr)
    encoded = huffman_encode(data, allow_empty=False, verbose=verbose)
    with open(dst, 'wb') as f:
        f.write(encoded)
    return len(data), len(encoded)


def expand_file(src, dst, verbose=False):
    with open(src, 'rb') as f:
        data = f.read()
    if verbose:
        print(f'Decoding {src}...', file=sys.stderr)
    decoded = huffman_decode(data, verbose=verbose)
    with open(dst, 'wb') as f:
        f.write(decoded)
    return len(data), len(decoded)


def build_parser():
    parser = argparse.ArgumentParser(
        prog='huffman-compress',
        description='Static Huffman compression of files (NAME -> NAME.hh)')
    parser.add_argument('files', nargs='+', metavar='FILE')
    parser.add_argument('-d', '--decompress', action='store_true',
                        help='expand NAME.hh files instead of compressing')
    parser.add_argument('-o', '--output',
                        help='output path (only with a single FILE)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='report sizes and compression ratio')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.output and len(args.files) > 1:
        parser.error('-o/--output needs exactly one FILE')

    noun = 'expanded' if args.decompress else 'compressed'
    failures = 0
    for path in args.files:
        if not os.path.isfile(path):
            print(f'File to be {noun} does not exist.', file=sys.stderr)
            failures += 1
            continue
        if os.path.getsize(path) == 0:
            print(f'File to be {noun} is empty.', file=sys.stderr)
            failures += 1
            continue

        if args.decompress:
            dst = args.output or expanded_name(path)
            action = expand_file
        else:
            dst = args.output or compressed_name(path)
            action = compress_file
        try:
            action(path, dst, verbose=args.verbose)
        except (HuffmanError, UnderflowError, OSError, ValueError) as e:
            print(f'Error: {path}: {e}', file=sys.stderr)
            failures += 1

    return 1 if failures else 0


if __name__ == '__main__':
    sys.exit(main())
