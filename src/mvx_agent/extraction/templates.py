"""Extraction prompts. ``{recent_messages}`` is filled by ``compose_context``."""

TRANSFER_TEMPLATE = """\
Respond with a JSON markdown block containing only the extracted values. \
Use null for any values that cannot be determined.

Example response:
```json
{{
    "receiver": "erd12r22hx2q4jjt8e0gukxt5shxqjp9ys5nwdtz0gpds25zf8qwtjdqyzfgzm",
    "amount": "1",
    "token": "EGLD"
}}
```

{recent_messages}

Given the recent messages, extract the following information about the requested token transfer:
- Receiver wallet address
- Amount to transfer
- Token identifier (EGLD, or an ESDT identifier such as USDC-c76f1f)

Respond with a JSON markdown block containing only the extracted values."""


RECEIVE_TEMPLATE = """\
Respond with a JSON markdown block containing only the extracted values. \
Use null for any values that cannot be determined.

Example response:
```json
{{
    "amount": "0.5"
}}
```

{recent_messages}

Given the recent messages, extract how much EGLD the user wants to send to the agent:
- Amount of EGLD

Respond with a JSON markdown block containing only the extracted values."""


BIRTHDAY_WARP_TEMPLATE = """\
Respond with a JSON markdown block containing only the extracted values. \
Use null for any values that cannot be determined.

Example response:
```json
{{
    "walletAddress": "erd1ezxnz5lywd5zpcnl7x3u74vc60tgjxdnga3s0608gmnx6rsxmwhqudsllw"
}}
```

{recent_messages}

Given the recent messages, extract the following information about the birthday warp request:
- Wallet address

Respond with a JSON markdown block containing only the extracted values."""


CREATE_TOKEN_TEMPLATE = """\
Respond with a JSON markdown block containing only the extracted values. \
Use null for any values that cannot be determined.

Example response:
```json
{{
    "tokenName": "COIN",
    "tokenTicker": "COIN",
    "decimals": 18,
    "amount": "1000"
}}
```

{recent_messages}

Given the recent messages, extract the following information about the token to create:
- Token name
- Token ticker
- Number of decimals
- Initial supply

Respond with a JSON markdown block containing only the extracted values."""


LEND_EGLD_TEMPLATE = """\
Respond with a JSON markdown block containing only the extracted values. \
Use null for any values that cannot be determined.

Example response:
```json
{{
    "amount": "1"
}}
```

{recent_messages}

Given the recent messages, extract how much EGLD the user wants to lend on Hatom:
- Amount of EGLD

Respond with a JSON markdown block containing only the extracted values."""


ADD_COLLATERAL_TEMPLATE = """\
Respond with a JSON markdown block containing only the extracted values. \
Use null for any values that cannot be determined.

Example response:
```json
{{
    "amount": "10",
    "token": "HEGLD-d61095"
}}
```

{recent_messages}

Given the recent messages, extract the following information about the collateral to add on Hatom:
- Amount of hTokens
- hToken identifier (null if not mentioned)

Respond with a JSON markdown block containing only the extracted values."""
