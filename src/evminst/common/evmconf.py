# Opcode layout
PUSH_BASE = 0x5F    # PUSH<n> -> PUSH_BASE + n
DUP_BASE = 0x7F     # DUP<n>  -> DUP_BASE + n
SWAP_BASE = 0x8F    # SWAP<n> -> SWAP_BASE + n

BYTE_MAX = 0xFF

# Immediate operands
MIN_PUSH_BYTES = 1
MAX_PUSH_BYTES = 32

# DUP/SWAP stack depth
MIN_STACK_INDEX = 1
MAX_STACK_INDEX = 16

# Assembler
LABEL_REF_WIDTH = 2  # bytes used by 'push &label'
