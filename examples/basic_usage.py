#!/usr/bin/env python3
"""
DataAPI Python Client - Basic Usage Example

This example demonstrates:
- Connecting to a Data API endpoint
- Basic CRUD operations (Insert, Find, Update, Delete)
- Query operators
- Projections and sorting
- Error handling

Set DATA_API_URL and DATA_API_KEY before running it.
"""
import logging
import os
import sys

from dataapi import ApiError, Client, Query, TransportError


def main():
    print("=" * 60)
    print("DataAPI Python Client - Basic Usage Example")
    print("=" * 60)

    logging.basicConfig(level=logging.INFO)

    base_url = os.environ.get('DATA_API_URL')
    if not base_url:
        print("✗ DATA_API_URL is not set")
        sys.exit(1)

    client = Client(base_url, api_key=os.environ.get('DATA_API_KEY'))
    users = client.shop.users

    try:
        # Insert a single document
        print("\n1. INSERT ONE")
        print("-" * 60)
        user_id = users.insert_one({
            'name': 'Alice Johnson',
            'email': 'alice@example.com',
            'age': 30,
            'city': 'New York',
            'active': True,
            'tags': ['python', 'golang', 'databases'],
        })
        print(f"Inserted user with ID: {user_id}")

        # Insert multiple documents
        print("\n2. INSERT MANY")
        print("-" * 60)
        ids = users.insert_many([
            {'name': 'Bob Smith', 'age': 25, 'city': 'San Francisco', 'active': True},
            {'name': 'Carol White', 'age': 35, 'city': 'Seattle', 'active': False},
            {'name': 'David Brown', 'age': 28, 'city': 'Boston', 'active': True},
        ])
        print(f"Inserted {len(ids)} users")

        # Find with query operators, projection and sorting
        print("\n3. FIND")
        print("-" * 60)
        docs = users.find(
            {'age': Query.gte(25), 'city': Query.nin(['Boston'])},
            projection={'name': 1, 'age': 1, '_id': 0},
            sort={'age': -1},
            limit=10,
        )
        for doc in docs:
            print(f"  {doc['name']} ({doc['age']})")

        print("\n4. FIND ONE")
        print("-" * 60)
        alice = users.find_one({'name': 'Alice Johnson'})
        print(f"Found: {alice}")

        # Update
        print("\n5. UPDATE")
        print("-" * 60)
        result = users.update_one({'name': 'Alice Johnson'}, {'$set': {'age': 31}})
        print(f"Modified {result.get('modifiedCount', 0)} document(s)")
        result = users.update_many({'active': False}, {'$set': {'archived': True}}, upsert=False)
        print(f"Archived {result.get('modifiedCount', 0)} document(s)")

        # Delete
        print("\n6. DELETE")
        print("-" * 60)
        deleted = users.delete_many({})
        print(f"Deleted {deleted} documents")
    except ApiError as e:
        print(f"✗ API error ({e.status_code}, {e.error_code}): {e}")
    except TransportError as e:
        print(f"✗ Could not reach the server: {e}")
    finally:
        client.close()


if __name__ == '__main__':
    main()
