import requests
import os
import argparse

proxy_base_url = os.getenv('PROXY_BASE_URL', 'http://localhost:3000')


def check(url):
    response = requests.get(url, stream=True)
    print(f"GET {url}")
    print(f"  Status: {response.status_code}")
    print(f"  Content-Type: {response.headers.get('Content-Type', 'N/A')}")
    print(f"  Proxy error: {response.headers.get('X-Asset-Proxy-Error', 'no')}")
    response.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description='Fetch one URL in explicit mode and one '
                                     'asset through a running proxy.')
    parser.add_argument('--url', default='https://example.com',
                        help='Target URL for explicit mode')
    parser.add_argument('--asset', default='/ftewebgl.js',
                        help='Asset path for asset mode')
    args = parser.parse_args()

    check(f'{proxy_base_url}/proxy?url={requests.utils.quote(args.url, safe="")}')
    check(f'{proxy_base_url}/{args.asset.lstrip("/")}')
