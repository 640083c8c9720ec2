import sys
import logging
import argparse

from regex_preprocessor import preprocess, to_postfix
from thompson_builder import MalformedPattern, build
from nfa_simulator import simulate, simulate_with_trace
from automaton_tracer import automaton_to_graph
from adaptive_parser import Status, tokenize
from hairpin_grammar import make_hairpin_parser, parser_from_json

# command line front-end for the two phases:
#   regex   pattern -> NFA, test strings against it
#   parse   token string -> adaptive LL(1) parse
#   demo    the stock run of both: (A|G)+ on AGAGA and AG.CU
#
# usage:
# python resilient_cli.py regex "(A|G)+" AGAGA AT --trace
# python resilient_cli.py parse AG.CU


def run_regex(pattern, texts, trace=False, dot=False, out=None):
    out = out or sys.stdout
    expanded = preprocess(pattern)
    postfix = to_postfix(expanded)
    out.write(f"Regex Pattern: {pattern}\n")
    out.write(f"Preprocessed:  {expanded}\n")
    out.write(f"Postfix:       {postfix}\n")
    try:
        nfa = build(postfix)
    except MalformedPattern as exc:
        out.write(f"Error: {exc}\n")
        return 1

    for text in texts:
        if trace:
            accepted, report = simulate_with_trace(nfa, text)
            out.write(f"Testing string '{text}':\n{report}\n")
        else:
            accepted = simulate(nfa, text)
            out.write(f"Testing string '{text}': {'MATCH' if accepted else 'INVALID'}\n")
    if dot:
        out.write(automaton_to_graph(nfa).source)
    nfa.arena.clear()
    return 0


def run_parse(raw, config=None, out=None):
    out = out or sys.stdout
    out.write(f"Input: {raw}\n")
    try:
        parser = parser_from_json(config) if config else make_hairpin_parser()
        result = parser.parse(tokenize(raw))
    except ValueError as exc:
        # covers GrammarError and json.JSONDecodeError
        out.write(f"Error: {exc}\n")
        return 2
    out.write(result.trace + "\n")
    out.write(f"Status: {result.status.value}\n")
    for repair in result.repairs:
        out.write(f"Learned: {repair.found} -> {repair.expected} ({repair.tier}, {repair.affinity:g})\n")
    if result.status is Status.STABLE:
        return 0
    return 2 if result.status is Status.ERROR else 1


def run_demo(out=None):
    out = out or sys.stdout
    out.write("[PHASE 1] Lexical Analysis\n")
    run_regex("(A|G)+", ["AGAGA"], out=out)
    out.write("\n[PHASE 2] Syntactic Analysis (Adaptive)\n")
    out.write("Grammar: S -> A S T | G S C | .\n")
    return run_parse("AG.CU", out=out)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Regex-to-NFA pipeline and adaptive LL(1) parser')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='log each pass and parser action to stderr')
    commands = parser.add_subparsers(dest='command', required=True)

    regex = commands.add_parser('regex', help='compile a pattern and test strings')
    regex.add_argument('pattern')
    regex.add_argument('texts', nargs='*', help='strings to test')
    regex.add_argument('--trace', action='store_true', help='print the step trace')
    regex.add_argument('--dot', action='store_true', help='print the automaton as DOT')

    parse = commands.add_parser('parse', help='parse a token string')
    parse.add_argument('tokens', help='e.g. AG.CU')
    parse.add_argument('--json', dest='config',
                       help='parser configuration as a JSON document string')

    commands.add_parser('demo', help='run both stock phases')

    args = parser.parse_args(argv)

    if args.verbose and not logging.getLogger().handlers:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(levelname)s %(name)s: %(message)s')

    if args.command == 'regex':
        return run_regex(args.pattern, args.texts, args.trace, args.dot)
    if args.command == 'parse':
        return run_parse(args.tokens, args.config)
    return run_demo()


if __name__ == '__main__':
    sys.exit(main())
