# -*- coding: utf-8 -*-
"""
Request monitoring for SharePoint Online admin commands.

This module tracks the web requests a command issues and the throttling
signals SharePoint sends back, so they can be summarized in debug mode.
"""


class RequestMonitor:
    """
    Monitor and track SharePoint request metrics.

    SharePoint Online signals throttling with:
    - HTTP 429 (Too Many Requests) or 503 (Server Too Busy)
    - Retry-After header: seconds to wait before the next request
    - SPRequestGuid header: correlation id to quote in support tickets
    """

    def __init__(self):
        """Initialize request monitoring metrics"""
        self.reset()

    def reset(self):
        """Reset all counters (used between commands and by tests)"""
        self.metrics = {
            'total_requests': 0,
            'failed_requests': 0,
            'throttled_requests': 0,
            'last_retry_after': None,
            'last_correlation_id': None
        }

        # Track API request types
        self.request_types = {
            'GET': 0,
            'POST': 0
        }

        # Track API operation types
        self.operations = {
            'context_info': 0,          # POST to /_api/contextinfo (request digest)
            'process_query': 0,         # POST to /_vti_bin/client.svc/ProcessQuery
            'rest_get': 0,              # GET to /_api/
            'rest_post': 0,             # POST to other /_api/ endpoints
            'other': 0                  # Other unclassified operations
        }

    def analyze_response(self, response, method=None, url=None):
        """
        Analyze a SharePoint response for throttling info.

        Args:
            response: requests.Response object from SharePoint
            method (str): HTTP method (GET, POST)
            url (str): Request URL for operation type detection

        Returns:
            dict: Throttling information extracted from the response
        """
        self.metrics['total_requests'] += 1

        if method and method.upper() in self.request_types:
            self.request_types[method.upper()] += 1

        if url and method:
            self._categorize_operation(url, method.upper())

        headers = response.headers
        correlation_id = headers.get('SPRequestGuid')
        if correlation_id:
            self.metrics['last_correlation_id'] = correlation_id

        retry_after = headers.get('Retry-After')
        if response.status_code in (429, 503):
            self.metrics['throttled_requests'] += 1
            self.metrics['last_retry_after'] = retry_after
            print(f"[!] THROTTLING DETECTED: SharePoint returned {response.status_code}")
            if retry_after:
                print(f"[!] SharePoint asked to wait {retry_after} seconds before retrying")
        elif response.status_code >= 400:
            self.metrics['failed_requests'] += 1

        return {
            'status_code': response.status_code,
            'retry_after': retry_after,
            'correlation_id': correlation_id
        }

    def _categorize_operation(self, url, method):
        url_lower = url.lower()

        if '/_api/contextinfo' in url_lower:
            self.operations['context_info'] += 1
        elif '/_vti_bin/client.svc/processquery' in url_lower:
            self.operations['process_query'] += 1
        elif '/_api/' in url_lower and method == 'GET':
            self.operations['rest_get'] += 1
        elif '/_api/' in url_lower and method == 'POST':
            self.operations['rest_post'] += 1
        else:
            self.operations['other'] += 1

    def get_metrics_summary(self):
        """
        Get a summary of request metrics.

        Returns:
            dict: Metrics including the throttle rate
        """
        total = self.metrics['total_requests']
        throttle_rate = self.metrics['throttled_requests'] / total if total else 0.0
        return {**self.metrics, 'throttle_rate': throttle_rate}


# Global request monitor instance
request_monitor = RequestMonitor()


def print_request_summary():
    """
    Print the request statistics collected while the command ran.

    Displays:
    - Total requests and failed requests
    - Throttled requests and the last Retry-After value
    - Breakdown by HTTP method and operation type
    """
    metrics = request_monitor.get_metrics_summary()

    print("\n" + "="*60)
    print("SHAREPOINT REQUEST SUMMARY")
    print("="*60)
    print(f"[STATS] Request Statistics:")
    print(f"   - Total Requests:           {metrics['total_requests']:>6}")
    print(f"   - Failed Requests:          {metrics['failed_requests']:>6}")
    print(f"   - Throttled Requests:       {metrics['throttled_requests']:>6} ({metrics['throttle_rate']:.1%})")

    if any(request_monitor.request_types.values()):
        print(f"\n[API] Request Methods:")
        for method, count in request_monitor.request_types.items():
            if count > 0:
                print(f"   - {f'{method} requests:':<27} {count:>6}")

    if any(request_monitor.operations.values()):
        print(f"\n[OPS] Operation Types:")
        for op_type, count in request_monitor.operations.items():
            if count > 0:
                op_name = op_type.replace('_', ' ').title()
                print(f"   - {f'{op_name}:':<27} {count:>6}")

    if metrics['last_correlation_id']:
        print(f"\n[=] Last SPRequestGuid: {metrics['last_correlation_id']}")

    if metrics['throttled_requests']:
        print(f"\n[!] WARNING: SharePoint throttled this command")
    else:
        print(f"\n[OK] No throttling detected")
    print("="*60)
