"""GraphQL documents for the Polymarket subgraphs.

Field names differ between subgraph versions; only the adapter in
``polyflow.ingestion.subgraph`` reads them.
"""

ORDER_FILLED_QUERY = """
query GetOrderFlow($first: Int!, $skip: Int!, $startTime: BigInt!, $endTime: BigInt!) {
  orderFilleds(
    first: $first
    skip: $skip
    orderBy: timestamp
    orderDirection: asc
    where: { timestamp_gte: $startTime, timestamp_lt: $endTime }
  ) {
    id
    timestamp
    maker
    taker
    makerAssetId
    takerAssetId
    makerAmountFilled
    takerAmountFilled
    isBuy
    condition {
      id
    }
  }
}
"""

TRANSACTIONS_QUERY = """
query GetRecentTrades($first: Int!, $skip: Int!, $startTime: BigInt!, $endTime: BigInt!) {
  transactions(
    first: $first
    skip: $skip
    orderBy: timestamp
    orderDirection: asc
    where: { timestamp_gte: $startTime, timestamp_lt: $endTime }
  ) {
    id
    timestamp
    type
    tradeAmount
    outcomeIndex
    user {
      id
    }
    market {
      id
    }
  }
}
"""

TOP_TRADERS_QUERY = """
query GetTopTraders($first: Int!, $orderBy: Account_orderBy!) {
  accounts(first: $first, orderBy: $orderBy, orderDirection: desc) {
    id
    collateralVolume
    profit
    numTrades
  }
}
"""

GLOBAL_STATS_QUERY = """
query GetGlobalStats {
  globals(first: 1) {
    numOpenConditions
    numClosedConditions
    numTraders
    collateralVolume
  }
}
"""

QUERIES_BY_ENTITY = {
    "orderFilleds": ORDER_FILLED_QUERY,
    "transactions": TRANSACTIONS_QUERY,
}
