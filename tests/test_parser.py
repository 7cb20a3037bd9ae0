import unittest

from jqlive.syntax.parser import (
    ArrayNode,
    BooleanNode,
    JsonKey,
    MAX_DEPTH,
    NestingError,
    NumberNode,
    ObjectNode,
    ParseError,
    Parser,
    StringNode,
    dumps,
    parse,
    parse_with_recovery,
)
from jqlive.syntax.tokens import TokenKind, tokenize


class ParseLeafTests(unittest.TestCase):
    def test_parse_int(self) -> None:
        self.assertEqual(parse("34"), NumberNode("34"))

    def test_number_keeps_source_formatting(self) -> None:
        self.assertEqual(parse(" 1.500 "), NumberNode("1.500"))

    def test_string_is_not_unescaped(self) -> None:
        self.assertEqual(parse('"a\\nb"'), StringNode('"a\\nb"'))

    def test_boolean(self) -> None:
        self.assertEqual(parse("\nfalse\n"), BooleanNode("false"))


class ParseContainerTests(unittest.TestCase):
    def test_object_single_entry(self) -> None:
        node = parse('{ "foo": "bar" }')
        self.assertEqual(node, ObjectNode(((JsonKey('"foo"'), StringNode('"bar"')),)))

    def test_array_of_leaves(self) -> None:
        node = parse('[34, true, "hello world"]')
        self.assertEqual(
            node,
            ArrayNode((NumberNode("34"), BooleanNode("true"), StringNode('"hello world"'))),
        )

    def test_duplicate_keys_are_all_kept(self) -> None:
        node = parse('{"a": 1, "a": 2}')
        assert isinstance(node, ObjectNode)
        self.assertEqual(
            [(key.lexeme, value) for key, value in node.entries],
            [('"a"', NumberNode("1")), ('"a"', NumberNode("2"))],
        )

    def test_nested_multiline(self) -> None:
        node = parse('{\r\n  "xs": [1, [2]],\n  "o": {"k": true}\n}\n')
        assert isinstance(node, ObjectNode)
        self.assertEqual(node.entries[0][1], ArrayNode((NumberNode("1"), ArrayNode((NumberNode("2"),)))))
        self.assertEqual(node.entries[1][1], ObjectNode(((JsonKey('"k"'), BooleanNode("true")),)))

    def test_empty_containers(self) -> None:
        self.assertEqual(parse("{}"), ObjectNode())
        self.assertEqual(parse("[ ]"), ArrayNode())


class ParseFailureTests(unittest.TestCase):
    def test_empty_input_fails_at_end_of_input(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse("")
        self.assertIn("end of input", str(ctx.exception))

    def test_trailing_content_fails(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse("1 2")
        self.assertIn("expected end of input", str(ctx.exception))

    def test_object_trailing_comma_fails(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse('{"a": 1,}')
        self.assertIn("expected string", str(ctx.exception))

    def test_object_missing_colon(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse('{"a" 1}')
        self.assertIn("expected ':'", str(ctx.exception))
        self.assertIn("number '1'", str(ctx.exception))

    def test_object_bad_separator(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse('{"a": 1 "b": 2}')
        self.assertIn("expected ',' or '}' in object", str(ctx.exception))

    def test_object_entry_errors_are_hard(self) -> None:
        with self.assertRaises(ParseError):
            parse('{"a": @}')

    def test_non_string_key(self) -> None:
        with self.assertRaises(ParseError):
            parse("{1: 2}")

    def test_unknown_value(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse("null")
        self.assertIn("expected a value", str(ctx.exception))

    def test_unclosed_array_is_hard_failure(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse("[1, 2")
        self.assertIn("in array", str(ctx.exception))

    def test_error_position(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse('{\n  "a": 1\n  "b": 2\n}')
        err = ctx.exception
        self.assertEqual((err.line, err.column), (3, 3))
        self.assertIn("line 3, column 3", err.describe())
        self.assertNotIn("line", err.message)


class ArrayRecoveryTests(unittest.TestCase):
    def test_missing_element_is_soft(self) -> None:
        node, errors = parse_with_recovery("[1,, 3]")
        self.assertEqual(node, ArrayNode((NumberNode("1"), NumberNode("3"))))
        self.assertEqual(len(errors), 1)
        self.assertIn("expected a value, found ','", errors[0].message)

    def test_trailing_comma_in_array_is_soft(self) -> None:
        node, errors = parse_with_recovery("[1,]")
        self.assertEqual(node, ArrayNode((NumberNode("1"),)))
        self.assertEqual(len(errors), 1)

    def test_nested_errors_collect_in_one_list(self) -> None:
        parser = Parser("[[,], [1,]]")
        node = parser.parse()
        self.assertEqual(node, ArrayNode((ArrayNode(), ArrayNode((NumberNode("1"),)))))
        self.assertEqual(len(parser.soft_errors), 3)

    def test_unconsumed_bad_token_is_hard(self) -> None:
        with self.assertRaises(ParseError) as ctx:
            parse("[1, @, 3]")
        self.assertIn("expected ',' or ']' in array, found invalid character '@'", str(ctx.exception))

    def test_element_that_stops_midway_is_hard(self) -> None:
        with self.assertRaises(ParseError):
            parse('[{"a" 1}, 2]')

    def test_parse_does_not_raise_for_soft_errors(self) -> None:
        self.assertEqual(parse("[,]"), ArrayNode())


class NestingDepthTests(unittest.TestCase):
    def test_nesting_at_limit_parses(self) -> None:
        text = "[" * MAX_DEPTH + "1" + "]" * MAX_DEPTH
        node = parse(text)
        for _ in range(MAX_DEPTH - 1):
            self.assertIsInstance(node, ArrayNode)
            node = node.items[0]
        self.assertEqual(node, ArrayNode((NumberNode("1"),)))

    def test_deep_arrays_fail_hard(self) -> None:
        text = "[" * 600 + "1" + "]" * 600
        with self.assertRaises(NestingError) as ctx:
            parse(text)
        self.assertIn("nesting too deep", ctx.exception.message)
        self.assertEqual((ctx.exception.line, ctx.exception.column), (1, MAX_DEPTH + 1))

    def test_deep_nesting_is_not_recovered_inside_arrays(self) -> None:
        with self.assertRaises(NestingError):
            parse_with_recovery("[1, " + "[" * 600 + "]" * 600 + ", 2]")

    def test_deep_objects_fail_hard(self) -> None:
        text = '{"a": ' * 600 + "1" + "}" * 600
        with self.assertRaises(ParseError):
            parse(text)

    def test_custom_limit(self) -> None:
        with self.assertRaises(NestingError):
            Parser("[[[]]]", max_depth=2).parse()
        self.assertEqual(Parser("[[]]", max_depth=2).parse(), ArrayNode((ArrayNode(),)))

    def test_many_soft_errors_report_positions(self) -> None:
        parser = Parser("[\n" + "," * 5000 + "]")
        parser.parse()
        self.assertEqual(len(parser.soft_errors), 5001)
        last = parser.soft_errors[-1]
        self.assertEqual((last.line, last.column), (2, 5001))


class ParserPrimitiveTests(unittest.TestCase):
    def test_peek_past_end_is_eof(self) -> None:
        parser = Parser("1")
        parser.advance()
        self.assertIs(parser.peek().kind, TokenKind.EOF)
        self.assertIs(parser.advance().kind, TokenKind.EOF)

    def test_expect_skips_whitespace(self) -> None:
        parser = Parser(" \n ,")
        self.assertEqual(parser.expect(TokenKind.COMMA).lexeme, ",")

    def test_expect_names_both_kinds(self) -> None:
        parser = Parser(":")
        with self.assertRaises(ParseError) as ctx:
            parser.expect(TokenKind.COMMA)
        self.assertEqual(ctx.exception.message, "expected ',', found ':'")


class DumpsTests(unittest.TestCase):
    def test_round_trip_matches_whitespace_free_source(self) -> None:
        samples = [
            '{ "a" : [ 1 , 2.5 , true ] ,\n "b" : { } , "c" : "x y" }',
            "[\r\n  [],\n  [ -1. , .5 ]\n]\n",
            '"just a string"',
        ]
        for sample in samples:
            with self.subTest(sample=sample):
                compact = "".join(tok.lexeme for tok in tokenize(sample) if not tok.kind.is_whitespace)
                self.assertEqual(dumps(parse(sample)), compact)


if __name__ == "__main__":
    unittest.main()
