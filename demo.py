from alipay_gateway import AlipayClient, BizContentCall, KeyPair, SignType
from alipay_gateway.api.response import payload_node_name
import logging

logging.basicConfig(level=logging.DEBUG)

print("--- alipay_gateway Demo ---")

# 1. Key material (a real deployment loads the app private key and the
#    gateway public key with KeyPair.load_from_files)
key_pair = KeyPair.generate(2048)
print(f"[+] Generated {key_pair.key_size}-bit keypair, can_verify={key_pair.can_verify()}")

# 2. Client against the sandbox gateway
client = AlipayClient("2021000000000000", key_pair, sign_type=SignType.RSA2)
print(f"[+] Client ready for {client.gateway_url} ({client.sign_type.value})")

# 3. Signed request parameters
call = BizContentCall("alipay.trade.query", {"out_trade_no": "123"})
params = client.build_params(call)
for key, value in params.items():
    print(f"    {key} = {value[:60]}")
print(f"[+] Response node: {payload_node_name(call.api_name())}")

# 4. Redirect URL for a page payment
page_call = BizContentCall(
    "alipay.trade.page.pay",
    {"out_trade_no": "123", "total_amount": "9.99", "subject": "demo", "product_code": "FAST_INSTANT_TRADE_PAY"},
    params={"return_url": "https://example.com/return"},
)
print(f"[+] Page URL: {client.build_page_url(page_call)[:100]}...")

# 5. Chunked encryption round trip
secret = b"card data " * 50
assert key_pair.decrypt(key_pair.encrypt(secret)) == secret
print(f"[+] Encrypted and decrypted {len(secret)} bytes")

client.close()
print("--- Demo Complete ---")
