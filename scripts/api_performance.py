"""
API Performance Testing Script
Calls every GET endpoint of a running dukabook server and reports timings.

Usage:
    DUKABOOK_API_URL=http://127.0.0.1:8000/api/v1 python scripts/api_performance.py

Credentials come from DUKABOOK_USERNAME / DUKABOOK_PASSWORD or are prompted for.
"""

import getpass
import json
import os
import sys
import time
from datetime import datetime
from typing import Dict, List, Optional

import requests

BASE_URL = os.environ.get('DUKABOOK_API_URL', 'http://127.0.0.1:8000/api/v1')
USERNAME = os.environ.get('DUKABOOK_USERNAME', '')
PASSWORD = os.environ.get('DUKABOOK_PASSWORD', '')
REQUEST_TIMEOUT = 30

# (name, endpoint, params)
ENDPOINTS = [
    ("Auth - Current User", "/auth/me/", None),
    ("Products - List", "/products/", None),
    ("Products - Search", "/products/", {"search": "a"}),
    ("Products - Low Stock", "/products/", {"stock_status": "low_stock"}),
    ("Products - Summary", "/products/summary/", None),
    ("Categories - List", "/categories/", None),
    ("Inventory - Overview", "/inventory/overview/", None),
    ("Inventory - Stock Levels", "/inventory/stock-levels/", None),
    ("Inventory - Movements", "/inventory/transactions/", {"limit": 50}),
    ("Sales - List", "/sales/", None),
    ("Sales - Summary", "/sales/summary/", None),
    ("Debtors - List", "/debtors/", None),
    ("Debtors - Overdue", "/debtors/", {"status": "overdue"}),
    ("Debtors - Summary", "/debtors/summary/", None),
    ("Suppliers - List", "/suppliers/", None),
    ("Expenses - List", "/expenses/", None),
    ("Expenses - Summary", "/expenses/summary/", None),
    ("Reports - Dashboard", "/reports/dashboard/", None),
    ("Reports - Weekly Summary", "/reports/summary/", {"preset": "weekly"}),
    ("Reports - Monthly Summary", "/reports/summary/", {"preset": "monthly"}),
    ("Reports - Yearly Summary", "/reports/summary/", {"preset": "yearly"}),
]


class APITester:
    """Class to handle API testing and performance measurement"""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')
        self.results: List[Dict] = []
        self.session = requests.Session()

    def authenticate(self, username: str, password: str) -> bool:
        """Authenticate and get access token"""
        print(f"🔐 Authenticating as {username}...")
        try:
            response = self.session.post(
                f"{self.base_url}/auth/login/",
                json={"username": username, "password": password},
                timeout=10
            )
        except requests.exceptions.RequestException as e:
            print(f"❌ Authentication error: {str(e)}")
            return False

        if response.status_code != 200:
            print(f"❌ Authentication failed: {response.status_code}")
            print(f"Response: {response.text}")
            return False

        self.session.headers.update({'Authorization': f"Bearer {response.json().get('access')}"})
        print("✅ Authentication successful!")
        return True

    def test_endpoint(self, name: str, endpoint: str, params: Optional[Dict] = None) -> Dict:
        """Call one endpoint and measure response time"""
        url = f"{self.base_url}{endpoint}"
        result = {
            'name': name,
            'endpoint': endpoint,
            'params': params or {},
            'timestamp': datetime.now().isoformat(),
        }

        start_time = time.time()
        try:
            response = self.session.get(url, params=params, timeout=REQUEST_TIMEOUT)
        except requests.exceptions.Timeout:
            result.update(status_code=0, response_time_ms=REQUEST_TIMEOUT * 1000, success=False,
                          error=f'Request timeout ({REQUEST_TIMEOUT}s)')
            self.results.append(result)
            return result
        except requests.exceptions.RequestException as e:
            result.update(status_code=0, response_time_ms=0, success=False, error=str(e))
            self.results.append(result)
            return result

        result['response_time_ms'] = round((time.time() - start_time) * 1000, 2)
        result['status_code'] = response.status_code
        result['success'] = response.status_code == 200

        try:
            data = response.json()
        except ValueError:
            result['response_text'] = response.text[:200]
        else:
            if isinstance(data, (list, dict)):
                result['item_count'] = len(data)

        if not result['success']:
            result['error'] = response.text[:500]

        self.results.append(result)
        return result

    def print_result(self, result: Dict):
        status_icon = "✅" if result['success'] else "❌"
        print(f"{status_icon} {result['name']}")
        print(f"   Endpoint: {result['endpoint']}")
        print(f"   Status: {result['status_code']}")
        print(f"   Response Time: {result['response_time_ms']}ms")
        if result.get('item_count') is not None:
            print(f"   Items: {result['item_count']}")
        if not result['success'] and result.get('error'):
            print(f"   Error: {result['error'][:200]}")
        print()

    def generate_report(self):
        """Print a summary of all calls grouped by area"""
        total_tests = len(self.results)
        successful = [r for r in self.results if r['success']]
        failed_tests = total_tests - len(successful)
        avg_response_time = sum(r['response_time_ms'] for r in successful) / len(successful) if successful else 0

        print("\n" + "=" * 80)
        print("📊 API PERFORMANCE TEST REPORT")
        print("=" * 80)
        print(f"Base URL: {self.base_url}")
        print(f"Test Date: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print(f"\nTotal Tests: {total_tests}")
        print(f"Successful: {len(successful)} ✅")
        print(f"Failed: {failed_tests} ❌")
        if total_tests:
            print(f"Success Rate: {(len(successful) / total_tests * 100):.1f}%")
        print(f"\nAverage Response Time: {avg_response_time:.2f}ms")

        if successful:
            fastest = min(successful, key=lambda x: x['response_time_ms'])
            slowest = max(successful, key=lambda x: x['response_time_ms'])
            print(f"Fastest: {fastest['name']} ({fastest['response_time_ms']}ms)")
            print(f"Slowest: {slowest['name']} ({slowest['response_time_ms']}ms)")

        categories = {}
        for result in self.results:
            categories.setdefault(result['name'].split(' - ')[0], []).append(result)

        print("\n" + "-" * 80)
        print("📋 RESULTS BY CATEGORY")
        print("-" * 80)
        for category, results in sorted(categories.items()):
            ok = [r for r in results if r['success']]
            avg_time = sum(r['response_time_ms'] for r in ok) / len(ok) if ok else 0
            print(f"\n{category}: {len(ok)}/{len(results)} successful, avg {avg_time:.2f}ms")
            for result in sorted(results, key=lambda x: x['response_time_ms'], reverse=True):
                status_icon = "✅" if result['success'] else "❌"
                print(f"  {status_icon} {result['endpoint']}: {result['response_time_ms']}ms")

        print("\n" + "=" * 80)

    def save_results(self, filename: str = "api_test_results.json"):
        """Save results to a JSON file"""
        with open(filename, 'w') as f:
            json.dump({
                'test_date': datetime.now().isoformat(),
                'base_url': self.base_url,
                'total_tests': len(self.results),
                'successful_tests': sum(1 for r in self.results if r['success']),
                'results': self.results
            }, f, indent=2)
        print(f"\n💾 Results saved to {filename}")


def main():
    print("=" * 80)
    print("🧪 API PERFORMANCE TESTING TOOL")
    print("=" * 80)
    print(f"Target: {BASE_URL}\n")

    username = USERNAME or input("Enter username: ")
    password = PASSWORD or getpass.getpass("Enter password: ")

    tester = APITester(BASE_URL)
    if not tester.authenticate(username, password):
        print("❌ Authentication failed. Cannot proceed with tests.")
        sys.exit(1)

    print("\n🚀 Starting API Tests...\n")
    for name, endpoint, params in ENDPOINTS:
        tester.print_result(tester.test_endpoint(name, endpoint, params))

    tester.generate_report()
    tester.save_results()

    if any(not r['success'] for r in tester.results):
        sys.exit(1)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\n⚠️ Tests interrupted by user")
        sys.exit(0)
