#!/usr/bin/env python3
"""
DataAPI Python Client - Aggregation Pipeline Example

This example demonstrates:
- Building aggregation pipelines from stage objects
- Using $match, $group, $project, $sort, $limit stages
- Accumulators ($sum, $avg, $min, $max, $push)
- Query operators and expressions inside stages
- Looking at the encoded pipeline before sending it

Set DATA_API_URL and DATA_API_KEY to run it against a server.
"""
import os
import random
from datetime import datetime, timedelta

from dataapi import Aggregation, Client, Expression, Pipeline, Query, Stage, encode


def field(path):
    return Expression.field_path(path)


def main():
    print("=" * 60)
    print("DataAPI Python Client - Aggregation Example")
    print("=" * 60)

    # Example 1: Group by city and calculate totals
    print("\n1. GROUP BY CITY - Total Sales")
    print("-" * 60)
    by_city = Pipeline(
        Stage.group(
            field('city'),
            totalSales=Aggregation.sum(field('total')),
            avgOrderValue=Aggregation.avg(field('total')),
            orderCount=Aggregation.sum(1),
        ),
        Stage.sort({'totalSales': -1}),
    )
    print(encode(by_city))

    # Example 2: Group by product with statistics
    print("\n2. GROUP BY PRODUCT - Statistics")
    print("-" * 60)
    by_product = Pipeline(
        Stage.group(
            field('product'),
            totalRevenue=Aggregation.sum(field('total')),
            unitsSold=Aggregation.sum(field('quantity')),
            minPrice=Aggregation.min_(field('price')),
            maxPrice=Aggregation.max_(field('price')),
        ),
        Stage.sort({'totalRevenue': -1}),
        Stage.limit(5),
    )
    print(encode(by_product))

    # Example 3: Filter and group - High value orders
    print("\n3. FILTER AND GROUP - High Value Orders")
    print("-" * 60)
    high_value = Pipeline(
        Stage.match(Query.or_(
            {'total': [Query.gte(500), Query.lt(5000)]},
            {'customerId': Query.in_(['CUST-1', 'CUST-2'])},
        )),
        Stage.group(
            field('city'),
            totalValue=Aggregation.sum(field('total')),
            products=Aggregation.push(field('product')),
        ),
        Stage.project(
            city=field('_id'),
            totalValue=1,
            productCount=Expression.size(field('products')),
            _id=0,
        ),
    )
    print(encode(high_value))

    base_url = os.environ.get('DATA_API_URL')
    if not base_url:
        print("\nDATA_API_URL is not set, not sending anything")
        return

    with Client(base_url, api_key=os.environ.get('DATA_API_KEY')) as client:
        sales = client.get_collection('shop', 'sales')

        # Generate sample sales data
        print("\nGenerating sample data...")
        cities = ['New York', 'San Francisco', 'Seattle', 'Boston', 'Austin']
        products = ['Laptop', 'Phone', 'Tablet', 'Monitor', 'Keyboard', 'Mouse']
        base_date = datetime.now() - timedelta(days=30)

        sales_data = []
        for i in range(100):
            sale = {
                'orderId': f'ORD-{1000 + i}',
                'product': random.choice(products),
                'quantity': random.randint(1, 5),
                'price': random.randint(50, 1500),
                'city': random.choice(cities),
                'date': base_date + timedelta(days=random.randint(0, 30)),
                'customerId': f'CUST-{random.randint(1, 50)}',
            }
            sale['total'] = sale['quantity'] * sale['price']
            sales_data.append(sale)

        sales.insert_many(sales_data)
        print(f"Inserted {len(sales_data)} sales records")

        print("\nSales by city:")
        for result in sales.aggregate(by_city):
            print(f"  {result['_id']}: ${result['totalSales']:,} "
                  f"({result['orderCount']} orders, avg: ${result['avgOrderValue']:.2f})")

        print("\nTop 5 products by revenue:")
        for result in sales.aggregate(by_product):
            print(f"  {result['_id']}: ${result['totalRevenue']:,}, {result['unitsSold']} units, "
                  f"${result['minPrice']} - ${result['maxPrice']}")

        print("\nHigh value orders by city:")
        for result in sales.aggregate(high_value):
            print(f"  {result['city']}: ${result['totalValue']:,} "
                  f"({result['productCount']} products)")

        deleted = sales.delete_many({})
        print(f"\nCleaned up {deleted} documents")


if __name__ == '__main__':
    main()
