# type: ignore
''' Assembler grammar '''

import re

import pyparsing as pp

import evminst.common.ops as ops
from evminst.sasm.fpp import FPP


id = pp.Word(pp.alphas + '_', pp.alphanums + '_')
comment = pp.Suppress(pp.Literal('//') + pp.rest_of_line)

label = (id + pp.Suppress(':')).set_parse_action(lambda r: (FPP.on_label, r))

hex_const = pp.Regex('0[xX][0-9a-fA-F]+')
dec_const = pp.Regex('[0-9]+')
int_const = hex_const | dec_const

refname = pp.Group(pp.Optional(id + pp.Suppress('::')) + id)
ref = pp.Suppress('&') + refname


def g_fixed(name):
    member = ops.lookup_mnemonic(name)
    return pp.CaselessKeyword(name).set_parse_action(lambda _: (FPP.issue_fixed, member))


def g_indexed(prefix, handler):
    # dup<N> / swap<N>, the index range is checked by the encoder
    cut = len(prefix)
    regex = pp.Regex(prefix + r'[0-9]+\b', flags=re.IGNORECASE)
    return regex.set_parse_action(lambda r: (handler, int(r[0][cut:])))


fixed_cmd = pp.MatchFirst([g_fixed(name) for name in ops.MNEMONICS])

dup_cmd = g_indexed('dup', FPP.issue_dup)
swap_cmd = g_indexed('swap', FPP.issue_swap)

push_kw = pp.Regex(r'push([0-9]+)?\b', flags=re.IGNORECASE)
push_cmd = (push_kw + (int_const | ref)).set_parse_action(lambda r: (FPP.issue_push, r))

byte_cmd = (pp.Suppress(pp.CaselessLiteral('.byte')) + int_const) \
    .set_parse_action(lambda r: (FPP.issue_byte, r))

asm_cmd = fixed_cmd \
    ^ dup_cmd \
    ^ swap_cmd \
    ^ push_cmd \
    ^ byte_cmd

statement = ((label + pp.Optional(asm_cmd)) | asm_cmd) + pp.Optional(comment)

# Fail on unknown command
unknown = pp.Regex(r'.*\S').set_parse_action(lambda r: (FPP.on_fail, r))

program = pp.ZeroOrMore(statement ^ comment ^ unknown)
