"""
Prometheus metrics for the matching service.
"""
from prometheus_client import Counter, Histogram, Gauge
from loguru import logger

# Counters
total_searches = Counter(
    'stylematch_searches_total',
    'Total number of match requests',
    ['search_mode']  # balanced, visual, semantic, style, color
)

search_errors = Counter(
    'stylematch_search_errors_total',
    'Total number of failed match requests',
    ['error_type']  # validation, retrieval, internal
)

# Histograms
search_duration = Histogram(
    'stylematch_search_duration_seconds',
    'Match request duration in seconds',
    ['search_mode'],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0]
)

retrieval_duration = Histogram(
    'stylematch_retrieval_duration_seconds',
    'Vector store query duration',
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
)

candidates_retrieved = Histogram(
    'stylematch_candidates_retrieved',
    'Number of candidates returned by the vector store per request',
    buckets=[0, 1, 5, 10, 20, 50, 100]
)

match_scores = Histogram(
    'stylematch_match_score',
    'Match scores of returned results',
    buckets=[10, 20, 30, 40, 50, 60, 70, 80, 90, 100]
)

# Gauges
api_health = Gauge(
    'stylematch_api_health',
    'API health status (1=healthy, 0=unhealthy)'
)

vector_store_points = Gauge(
    'stylematch_vector_store_points',
    'Number of media points in the vector store collection'
)


def record_search(search_mode: str, duration: float, success: bool = True, error_type: str = "internal") -> None:
    """
    Записать метрики поиска.

    Args:
        search_mode: Режим поиска (balanced, visual, ...)
        duration: Длительность в секундах
        success: Успешность запроса
        error_type: Тип ошибки (validation, retrieval, internal)
    """
    total_searches.labels(search_mode=search_mode).inc()
    search_duration.labels(search_mode=search_mode).observe(duration)

    if not success:
        search_errors.labels(error_type=error_type).inc()
        logger.warning(f"Search failed: mode={search_mode}, error={error_type}, duration={duration:.3f}s")
    else:
        logger.debug(f"Search recorded: mode={search_mode}, duration={duration:.3f}s")


def record_retrieval(duration: float, candidates: int) -> None:
    """
    Записать время запроса к векторному хранилищу.

    Args:
        duration: Длительность в секундах
        candidates: Количество кандидатов
    """
    retrieval_duration.observe(duration)
    candidates_retrieved.observe(candidates)
    logger.debug(f"Retrieval: {candidates} candidates in {duration:.3f}s")


def record_match_scores(scores: list) -> None:
    """Записать оценки возвращённых результатов."""
    for score in scores:
        match_scores.observe(score)


def update_vector_store_points(count: int) -> None:
    """
    Обновить количество точек в коллекции.

    Args:
        count: Количество точек
    """
    vector_store_points.set(count)
    logger.debug(f"Vector store points updated: {count}")


def set_api_health(healthy: bool) -> None:
    """
    Установить статус здоровья API.

    Args:
        healthy: True если API здоров
    """
    api_health.set(1 if healthy else 0)
    logger.debug(f"API health set to: {'healthy' if healthy else 'unhealthy'}")


def get_metrics_summary() -> dict:
    """
    Получить сводку текущих метрик.

    Returns:
        Словарь с основными метриками
    """
    return {
        "api_health": api_health._value.get(),
        "vector_store_points": vector_store_points._value.get(),
    }
