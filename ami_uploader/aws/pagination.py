"""
AWS pagination utilities.
"""

from typing import Any, Callable, Dict, List


def paginate_aws_response(
    client_method: Callable, response_key: str, next_token_key: str = "NextToken", **kwargs: Any
) -> List[Dict[str, Any]]:
    """
    Collect the items of a paginated AWS API response across all pages.

    Args:
        client_method: The boto3 client method to call (e.g., ec2_client.describe_images).
        response_key: The key in the response that contains the list of items.
        next_token_key: The key used for pagination token. Defaults to "NextToken".
        **kwargs: Additional parameters to pass to the client method.

    Returns:
        List of all items collected from all pages of the API response.
    """
    all_items: List[Dict[str, Any]] = []
    next_token = None

    while True:
        params = kwargs.copy()
        if next_token:
            params[next_token_key] = next_token

        response = client_method(**params)
        all_items.extend(response.get(response_key, []))

        next_token = response.get(next_token_key)
        if not next_token:
            break

    return all_items
