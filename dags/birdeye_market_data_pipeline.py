from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict

import pandas as pd
from airflow import DAG
from airflow.providers.standard.operators.python import PythonOperator

# Ensure project root is importable when running in Airflow.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from birdeye_client import BirdeyeClient, BirdeyeError, ResponseValidationError, TimeInterval
from birdeye_client.schemas import TokenListItem

logger = logging.getLogger(__name__)

DATA_BASE_PATH = "/opt/airflow/data"
SOL_ADDRESS = "So11111111111111111111111111111111111111112"

default_args = {
    "owner": "data_team",
    "retries": 1,
    "retry_delay": timedelta(minutes=1),
}


def _get_data_path(subdir: str) -> Path:
    path = Path(DATA_BASE_PATH) / subdir
    path.mkdir(parents=True, exist_ok=True)
    return path


def _log_and_raise(task: str, error: BirdeyeError) -> None:
    if isinstance(error, ResponseValidationError):
        logger.error("%s: response shape changed: %s", task, json.dumps(error.report(), default=str, indent=2))
    else:
        logger.error(f"{task}: Birdeye API error: {str(error)}")
    raise error


def fetch_token_list(**context) -> int:
    """
    Fetch the top tokens by 24h volume, store them as CSV, and push the file path via XCom.
    """

    client = BirdeyeClient.from_settings()

    try:
        response = client.token_list()
    except BirdeyeError as e:
        _log_and_raise("fetch_token_list", e)

    execution_date = context["ds_nodash"]
    file_path = _get_data_path("raw") / f"tokenlist_{execution_date}.csv"

    df = pd.DataFrame([token.model_dump() for token in response.data.tokens], columns=list(TokenListItem.model_fields))
    df["update_time"] = response.data.updateTime.isoformat()
    df.to_csv(file_path, index=False, encoding="utf-8")

    context["ti"].xcom_push(key="token_count", value=len(df))
    context["ti"].xcom_push(key="token_list_path", value=str(file_path))

    logger.info(f"Saved token list: {file_path} (rows={len(df)}, total={response.data.total})")
    return len(df)


def fetch_sol_price_history(**context) -> int:
    """
    Fetch the last day of 15m SOL prices and store them as CSV.
    """

    client = BirdeyeClient.from_settings()
    time_to = datetime.now(timezone.utc)

    try:
        response = client.history_price(
            address=SOL_ADDRESS,
            address_type="token",
            interval=TimeInterval.FIFTEEN_MINUTES,
            time_from=time_to - timedelta(days=1),
            time_to=time_to,
        )
    except BirdeyeError as e:
        _log_and_raise("fetch_sol_price_history", e)

    execution_date = context["ds_nodash"]
    file_path = _get_data_path("raw") / f"sol_history_{execution_date}.csv"

    df = pd.DataFrame([item.model_dump() for item in response.data.items], columns=["unixTime", "value"])
    if not df.empty:
        df["time"] = pd.to_datetime(df["unixTime"], unit="s", utc=True)
    df.to_csv(file_path, index=False, encoding="utf-8")

    context["ti"].xcom_push(key="price_history_path", value=str(file_path))

    logger.info(f"Saved SOL price history: {file_path} (rows={len(df)})")
    return len(df)


def summarize(**context) -> Dict[str, Any]:
    """
    Log a summary of what was fetched.
    """

    token_list_path = context["ti"].xcom_pull(key="token_list_path", task_ids="fetch_token_list")
    history_path = context["ti"].xcom_pull(key="price_history_path", task_ids="fetch_sol_price_history")

    tokens = pd.read_csv(token_list_path)
    history = pd.read_csv(history_path)

    summary = {
        "execution_date": context["ds"],
        "token_count": len(tokens),
        "tokens_without_symbol": int(tokens["symbol"].isna().sum()),
        "sol_points": len(history),
        "sol_last_price": float(history["value"].iloc[-1]) if not history.empty else None,
    }

    logger.info("Birdeye fetch summary: %s", json.dumps(summary, indent=2, ensure_ascii=False))
    return summary


with DAG(
    dag_id="birdeye_market_data_pipeline",
    default_args=default_args,
    schedule=None,
    start_date=datetime(2026, 1, 21),
    catchup=False,
    tags=["crypto", "birdeye"],
) as dag:
    fetch_token_list_task = PythonOperator(
        task_id="fetch_token_list",
        python_callable=fetch_token_list,
        retries=3,
        retry_delay=timedelta(seconds=30),
        retry_exponential_backoff=True,
        max_retry_delay=timedelta(minutes=5),
    )

    fetch_history_task = PythonOperator(
        task_id="fetch_sol_price_history",
        python_callable=fetch_sol_price_history,
        retries=3,
        retry_delay=timedelta(seconds=30),
        retry_exponential_backoff=True,
        max_retry_delay=timedelta(minutes=5),
    )

    summarize_task = PythonOperator(
        task_id="summarize",
        python_callable=summarize,
        retries=0,
    )

    [fetch_token_list_task, fetch_history_task] >> summarize_task
