import json
import logging
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Optional, Type, TypeVar

from pydantic import BaseModel
from redis.asyncio import Redis

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)


def json_serializer(obj):
    """Serializador JSON que maneja fechas y enums."""
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if hasattr(obj, "value"):
        return obj.value
    raise TypeError(f"Tipo no serializable: {type(obj)}")


class CacheService:
    """
    Servicio genérico para cachear modelos Pydantic en Redis.
    Los fallos de Redis nunca hacen fallar la petición: se registra y se consulta la BD.
    """

    @staticmethod
    async def get_or_set(
        redis_client: Optional[Redis],
        cache_key: str,
        db_fetch_func: Callable[[], Awaitable[T]],
        model_class: Type[T],
        expiry_seconds: int = 300,
    ) -> T:
        """
        Obtiene un objeto de Redis o lo calcula con `db_fetch_func` y lo guarda.

        Args:
            redis_client: Cliente Redis a usar (None desactiva la caché)
            cache_key: Clave única para identificar el objeto en caché
            db_fetch_func: Corrutina que obtiene los datos de la BD si no están en caché
            model_class: Clase del modelo Pydantic que se debe devolver
            expiry_seconds: Tiempo de expiración en segundos

        Returns:
            Instancia de `model_class`
        """
        if not redis_client:
            logger.debug("Cliente Redis no disponible, ejecutando consulta sin caché")
            return await db_fetch_func()

        try:
            cached_data = await redis_client.get(cache_key)
            if cached_data:
                logger.debug(f"Cache hit para clave: {cache_key}")
                try:
                    return model_class.model_validate(json.loads(cached_data))
                except (ValueError, TypeError) as e:
                    logger.warning(f"Ignorando datos en caché corruptos para {cache_key}: {e}")
                    await redis_client.delete(cache_key)
        except Exception as e:
            logger.error(f"Error al leer del caché: {str(e)}", exc_info=True)

        logger.debug(f"Cache miss para clave: {cache_key}")
        data = await db_fetch_func()

        if data is not None:
            try:
                serialized_data = json.dumps(data.model_dump(), default=json_serializer)
                await redis_client.set(cache_key, serialized_data, ex=expiry_seconds)
                logger.debug(f"Datos guardados en caché con clave: {cache_key}, TTL: {expiry_seconds}s")
            except Exception as e:
                logger.error(f"Error al guardar en Redis para {cache_key}: {e}", exc_info=True)

        return data

    @staticmethod
    async def invalidate(redis_client: Optional[Redis], *keys: str) -> int:
        """
        Elimina las claves indicadas. Devuelve cuántas se borraron.
        """
        if not redis_client or not keys:
            return 0
        try:
            count = await redis_client.delete(*keys)
            logger.debug(f"Invalidadas {count} claves: {', '.join(keys)}")
            return count
        except Exception as e:
            logger.warning(f"Error al invalidar claves {keys}: {e}")
            return 0


cache_service = CacheService()
